"""Small bundled dataset served when no usable report is available."""

from __future__ import annotations

from typing import List

from callcore.source_phone import PhoneTableParser
from callcore.store import Dataset, dataset_from_result

SAMPLE_HEADER = [
    "Fila", "Telefone", "Status", "Data/Hora", "Atendida", "Encerrada",
    "Espera", "Duração (s)", "Atendimento", "Ramal", "Operador",
]

# queue, phone, status, call time (serial), wait, handle, extension, operator
_CALLS = [
    ("callcenter1", "82991592545", "Atendidas", 45931.25347222222, "00:00:09", "00:00:50", "1040", "WINNY VIANA"),
    ("callcenter1", "82991592545", "Atendidas", 45931.29722222222, "00:01:35", "00:00:35", "1017", "KASSIA"),
    ("callcenter1", "82991173908", "Atendidas", 45931.31944444444, "00:00:09", "00:00:24", "1010", "JOCELAINE SANTOS"),
    ("callcenter1", "8234365516", "Atendidas", 45931.32638888889, "00:01:17", "00:02:30", "1013", "ALICIA RAMOS"),
    ("callcenter1", "82994043126", "Atendidas", 45931.33333333333, "00:03:20", "00:05:59", "1010", "JOCELAINE SANTOS"),
    ("callcenter1", "82987592022", "Atendidas", 45931.33333333333, "00:00:50", "00:11:53", "1038", "LAURA LEITE"),
    ("callcenter1", "83988741997", "Atendidas", 45931.33472222222, "00:00:32", "00:04:57", "1010", "JOCELAINE SANTOS"),
    ("callcenter1", "83988296013", "Transferidas", 45931.33611111111, "00:00:14", "00:15:26", "1013", "ALICIA RAMOS"),
    ("callcenter1", "84987332255", "Atendidas", 45931.3375, "00:10:37", "00:20:24", "1038", "LAURA LEITE"),
    ("callcenter1", "82991799752", "Abandonadas", 45931.33888888889, "00:03:33", "00:00:00", None, None),
]


def sample_rows() -> List[list]:
    rows = [list(SAMPLE_HEADER)]
    for queue, phone, status, called, wait, handle, extension, operator in _CALLS:
        rows.append([queue, phone, status, called, None, None, wait, None, handle, extension, operator])
    return rows


def sample_dataset() -> Dataset:
    result = PhoneTableParser().parse(sample_rows(), filename="sample")
    return dataset_from_result(result, source="sample", filename="sample")
