from __future__ import annotations

import math
import numbers
import re
import unicodedata
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from callcore.records import Diagnostics
from callcore.timeparse import is_blank, parse_duration, parse_instant

HEADER_SEARCH_ROWS = 10
MIN_REPORT_COLUMNS = 13
MAX_CELL_LENGTH = 1000
UNKNOWN = "Unknown"

_FORMULA_PREFIX = re.compile(r"^[=+\-@]")

# Upload file name keyword -> queue label, first match wins.
QUEUE_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
    (("assistencial",), "Call Center Assistencial"),
    (("financeiro",), "Call Center Financeiro"),
    (("cancelamento",), "Call Center Cancelamento"),
    (("credenciado",), "Credenciados"),
    (("marcação", "marcacao"), "Marcação Mais Saúde"),
]

# Leading phone digits (area code) -> state label.
PHONE_PREFIX_REGIONS: List[Tuple[str, str]] = [
    ("82", "Alagoas"),
    ("83", "Paraíba"),
    ("84", "Natal"),
    ("61", "Distrito Federal"),
]

MACRO_REGIONS = {
    "Alagoas": "Nordeste",
    "Paraíba": "Nordeste",
    "Natal": "Nordeste",
    "Distrito Federal": "Centro-Oeste",
}

MONTHS = {
    "janeiro": 1, "january": 1,
    "fevereiro": 2, "february": 2,
    "março": 3, "marco": 3, "march": 3,
    "abril": 4, "april": 4,
    "maio": 5, "may": 5,
    "junho": 6, "june": 6,
    "julho": 7, "july": 7,
    "agosto": 8, "august": 8,
    "setembro": 9, "september": 9,
    "outubro": 10, "october": 10,
    "novembro": 11, "november": 11,
    "dezembro": 12, "december": 12,
}
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def as_frame(raw: object) -> pd.DataFrame:
    """Coerce a raw sheet (DataFrame or rows of cells) to a positional frame."""
    if isinstance(raw, pd.DataFrame):
        df = raw.copy()
    else:
        df = pd.DataFrame(list(raw or []))
    df.columns = range(df.shape[1])
    return df.reset_index(drop=True)


def row_cells(df: pd.DataFrame, idx: int) -> List[object]:
    return df.iloc[idx].tolist()


def row_width(cells: Sequence[object]) -> int:
    """Number of cells up to the last non-blank one."""
    width = len(cells)
    while width and is_blank(cells[width - 1]):
        width -= 1
    return width


def cell_at(cells: Sequence[object], idx: int) -> object:
    return cells[idx] if idx < len(cells) else None


def cell_text(value: object) -> str:
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_number(value: object) -> bool:
    if isinstance(value, bool) or is_blank(value):
        return False
    if isinstance(value, numbers.Real):
        return math.isfinite(float(value))
    try:
        return math.isfinite(float(str(value).strip()))
    except ValueError:
        return False


def sanitize_cell(value: object) -> str:
    text = cell_text(value)
    if _FORMULA_PREFIX.match(text):
        text = _FORMULA_PREFIX.sub("'", text)
    return text[:MAX_CELL_LENGTH]


def optional_text(value: object) -> Optional[str]:
    return cell_text(value) or None


def normalize_header(value: object) -> str:
    text = unicodedata.normalize("NFD", cell_text(value).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"[^a-z0-9]", "", text)


def strip_quotes(value: object) -> str:
    text = cell_text(value)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return text


def find_header_row(df: pd.DataFrame, keywords: Iterable[str], search_rows: int = HEADER_SEARCH_ROWS) -> Optional[int]:
    lowered = [k.lower() for k in keywords]
    for idx in range(min(search_rows, len(df))):
        cells = [c.lower() for c in df.iloc[idx].tolist() if isinstance(c, str)]
        if any(k in cell for cell in cells for k in lowered):
            return idx
    return None


def detect_queue_from_filename(filename: Optional[str]) -> str:
    lower = (filename or "").lower()
    for keywords, queue in QUEUE_KEYWORDS:
        if any(k in lower for k in keywords):
            return queue
    return UNKNOWN


def detect_period_from_filename(filename: Optional[str]) -> Optional[str]:
    lower = (filename or "").lower()
    month = next((num for name, num in MONTHS.items() if re.search(rf"(?<![a-z]){name}(?![a-z])", lower)), None)
    if month is None:
        return None
    year = re.search(r"20\d{2}", lower)
    label = MONTH_NAMES[month - 1]
    return f"{label} {year.group(0)}" if year else label


def region_from_phone(phone: Optional[str]) -> str:
    if not phone or phone.strip().lower() == "anonymous":
        return UNKNOWN
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("0"):
        digits = digits[1:]
    for prefix, region in PHONE_PREFIX_REGIONS:
        if digits.startswith(prefix):
            return region
    return UNKNOWN


def macro_region(region: Optional[str]) -> str:
    return MACRO_REGIONS.get(region or "", UNKNOWN)


def read_duration(value: object, diagnostics: Diagnostics) -> int:
    result = parse_duration(value)
    if not result.parsed and not is_blank(value):
        diagnostics.unparsed_fields += 1
    return result.seconds


def read_instant(value: object, diagnostics: Diagnostics) -> Optional[datetime]:
    instant = parse_instant(value)
    if instant is None and not is_blank(value):
        diagnostics.unparsed_fields += 1
    return instant
