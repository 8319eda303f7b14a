from __future__ import annotations

from datetime import datetime

import pytest

from callcore.records import CanonicalRecord, Outcome

TABLE_HEADER = [
    "Fila", "Telefone", "Status", "Data/Hora", "Atendida", "Encerrada",
    "Espera", "Duração (s)", "Atendimento", "Ramal", "Operador",
]


def make_record(
    id: str,
    outcome: Outcome = Outcome.ANSWERED,
    *,
    queue: str = "A",
    started_at: datetime | None = None,
    wait: int = 0,
    handle: int = 0,
    operator: str | None = None,
    region: str | None = None,
) -> CanonicalRecord:
    return CanonicalRecord(
        id=id,
        queue=queue,
        phone="82999990000",
        outcome=outcome,
        started_at=started_at,
        wait_seconds=wait,
        handle_seconds=handle,
        operator=operator,
        region=region,
    )


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def table_rows():
    """Received-calls workbook as read with header=None."""
    return [
        TABLE_HEADER,
        ["callcenter1", "82991592545", "Atendidas", 45931.25, None, None, 9 / 86400, 50, 50 / 86400, "1040", "WINNY VIANA"],
        ["callcenter1", "83988296013", "Transferidas", "01/10/2025 08:04", None, None, "00:00:14", 926, None, "1013", "ALICIA RAMOS"],
        ["callcenter1", "82991799752", "", 45931.33888888889, None, None, "00:03:33", 0, 0, None, None],
        ["callcenter1", None, "Atendidas", 45931.4, None, None, 0, 0, 0, None, None],
    ]


def report_row(call_id, status="Atendida", duration=120, phone="82991112222", region=None, started="2025-10-02 09:15:00"):
    row = [
        "Call Center Financeiro", status, started, None, None, duration,
        "1010", "JOCELAINE SANTOS", "00:02:00", "00:00:30", call_id, "cliente desligou", phone,
    ]
    if region is not None:
        row.append(region)
    return row


@pytest.fixture
def report_rows():
    return [
        ["Relatório de chamadas"],
        ["Período: outubro 2025"],
        ["Fila", "Status", "Entrada", "Atendimento", "Saída", "Duração", "Ramal", "Agente", "Tempo", "Espera", "ID", "Motivo", "Origem"],
        report_row("c-1"),
        report_row("c-2", status="Abandonada", duration=0, phone="8333334444"),
        report_row("c-1"),
        ["Call Center Financeiro", "Atendida", "2025-10-02 10:00:00"],
        report_row("c-3", phone="61 3333-4444", region="Distrito Federal"),
    ]


@pytest.fixture
def chat_text():
    return (
        '"Id";"OpenDate";"StorageDate";"Team";"UserPhone";"Status";"QueueTime";"OperationalTime";"AgentName"\n'
        '"t1";"2025-10-01T08:30:00.000Z";"";"Suporte";"5582999";"Closed";"00:01:00";"0d 00:04:00";"Ana"\n'
        '"t2";"";"02/10/2025 14:10";"Suporte";"5583999";"Canceled";"00:05:00";"00:00:00";""\n'
        '"t3";"not a date";"";"Vendas";"5584999";"Closed";"00:00:30";"00:02:00";"Bia"\n'
        '"t1";"2025-10-03T09:00:00";"";"Suporte";"5582999";"Closed";"00:01:00";"00:01:00";"Ana"\n'
    )


@pytest.fixture
def ticket_rows():
    return [
        ["Fila", "Tickets finalizados", "Tempo médio da 1ª resposta", "Tempo médio de espera", "Tempo médio de resposta", "Tempo médio de atendimento"],
        ["Suporte", 10, "00:00:30", "00:01:00", "00:00:40", "00:04:00"],
        ["Vendas", 0, "00:00:10", "00:05:00", "00:00:20", "00:02:00"],
        [None, 5, "00:00:10", "00:01:00", "00:00:20", "00:02:00"],
    ]
