"""Tolerant date and duration parsing for exported call/chat reports.

Every exporter we ingest stores times differently: spreadsheets keep
durations as fractional days and instants as day serials, text exports use
``HH:MM:SS`` clocks (sometimes prefixed with an elapsed-day count such as
``"0d 00:04:12"``) and Brazilian ``DD/MM/YYYY`` dates. The helpers below never
raise; an unparseable cell becomes ``None`` or zero seconds.
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
# Spreadsheet day serial 0 (1900 date system, leap-year bug included).
SERIAL_EPOCH = datetime(1899, 12, 30)

_ELAPSED_DAYS = re.compile(r"^(\d+)\s*d\s+(.+)$", re.IGNORECASE)
_CLOCK_SECONDS = re.compile(r"^\d+(?:\.\d+)?$")
_ISO_PREFIX = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")
_DAY_FIRST = re.compile(
    r"(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})(?:,?\s+(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?)?"
)


@dataclass(frozen=True)
class DurationParse:
    seconds: int
    parsed: bool


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clock_seconds(text: str) -> Optional[int]:
    # Only the seconds part may carry a fraction ("00:04:12.5").
    parts = [p.strip() for p in text.split(":")]
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts[:-1]):
        return None
    if not _CLOCK_SECONDS.match(parts[-1]):
        return None
    seconds = float(parts[-1])
    if len(parts) == 2:
        return math.floor(int(parts[0]) * 60 + seconds)
    return math.floor(int(parts[0]) * 3600 + int(parts[1]) * 60 + seconds)


def parse_duration(value: object) -> DurationParse:
    """Convert a duration cell to whole seconds.

    Tried in order: fractional day number, ``MM:SS`` / ``HH:MM:SS`` clock,
    ``"<N>d HH:MM:SS"``. The day count of the last form is dropped, matching
    what the chat platform's own reports show.
    """
    if is_blank(value) or isinstance(value, bool):
        return DurationParse(0, False)

    if isinstance(value, numbers.Real):
        if not math.isfinite(float(value)):
            return DurationParse(0, False)
        seconds = round_half_up(float(value) * SECONDS_PER_DAY)
        if seconds is None:
            return DurationParse(0, False)
        return DurationParse(max(int(seconds), 0), True)

    if isinstance(value, timedelta):
        return DurationParse(max(int(value.total_seconds()), 0), True)

    if isinstance(value, time):
        return DurationParse(value.hour * 3600 + value.minute * 60 + value.second, True)

    text = str(value).strip()
    seconds = _clock_seconds(text)
    if seconds is None:
        match = _ELAPSED_DAYS.match(text)
        if match:
            seconds = _clock_seconds(match.group(2))
    if seconds is None:
        logger.debug("unparsed duration %r", value)
        return DurationParse(0, False)
    return DurationParse(max(seconds, 0), True)


def _from_serial(serial: float) -> Optional[datetime]:
    if not math.isfinite(serial) or serial <= 0:
        return None
    try:
        seconds = round_half_up(serial * SECONDS_PER_DAY)
        return SERIAL_EPOCH + timedelta(seconds=int(seconds))
    except (OverflowError, ValueError):
        return None


def _from_iso(text: str) -> Optional[datetime]:
    if not _ISO_PREFIX.match(text):
        return None
    ts = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def _from_day_first(text: str) -> Optional[datetime]:
    match = _DAY_FIRST.search(text)
    if not match:
        return None
    day, month, year, hour, minute, second = match.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def parse_instant(value: object) -> Optional[datetime]:
    """Convert a date cell to a naive local ``datetime`` or ``None``.

    Day serials, ISO-8601 strings and ``DD/MM/YYYY[, HH:MM[:SS]]`` strings are
    accepted. Nothing is guessed: anything else is ``None`` and the caller
    leaves the record out of time-based views.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            value = value.tz_localize(None)
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, numbers.Real):
        instant = _from_serial(float(value))
    else:
        text = str(value).strip()
        instant = _from_iso(text) or _from_day_first(text)
    if instant is None:
        logger.debug("unparsed date %r", value)
    return instant


def format_seconds(seconds: object) -> str:
    if seconds is None or pd.isna(seconds):
        return "00:00:00"
    total = int(seconds)
    if total <= 0:
        return "00:00:00"
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def calendar_day(instant: Optional[datetime]) -> Optional[str]:
    if instant is None:
        return None
    return instant.strftime("%Y-%m-%d")
