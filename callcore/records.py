from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Tuple


class Outcome(str, Enum):
    ANSWERED = "Answered"
    ABANDONED = "Abandoned"
    TRANSFERRED = "Transferred"


class StructuralError(ValueError):
    """The whole input is unreadable; no partial dataset is produced."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid file: " + "; ".join(self.errors))


@dataclass(frozen=True)
class CanonicalRecord:
    id: str
    queue: str
    phone: str
    outcome: Outcome
    started_at: Optional[datetime] = None
    wait_seconds: int = 0
    handle_seconds: int = 0
    operator: Optional[str] = None
    extension: Optional[str] = None
    answered_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    region: Optional[str] = None
    reason: Optional[str] = None
    channel: str = "phone"


@dataclass(frozen=True)
class QueueSummaryRow:
    """One pre-aggregated queue line from a ticket platform export."""

    queue: str
    tickets: int = 0
    first_response_seconds: int = 0
    wait_seconds: int = 0
    response_seconds: int = 0
    handle_seconds: int = 0


@dataclass
class Diagnostics:
    skipped_rows: int = 0
    unparsed_fields: int = 0
    detected_queue: Optional[str] = None
    period: Optional[str] = None
    regions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseResult:
    records: Tuple[object, ...]
    diagnostics: Diagnostics


class RowParser(Protocol):
    source: str

    def parse(self, raw: object, *, filename: Optional[str] = None) -> ParseResult:
        ...


# ---------------- Aggregation outputs ----------------
@dataclass(frozen=True)
class KpiSummary:
    total: int = 0
    answered: int = 0
    abandoned: int = 0
    transferred: int = 0
    answer_rate: float = 0.0
    abandon_rate: float = 0.0
    average_wait: str = "00:00:00"
    average_handle: str = "00:00:00"
    period: str = ""


@dataclass(frozen=True)
class OperatorRollup:
    operator: str
    answered: int
    average_handle: str
    average_wait: str
    busiest_queue: str
    per_day_average: int
    extensions: str = ""


@dataclass(frozen=True)
class QueueRollup:
    queue: str
    total: int
    answered: int
    abandoned: int
    transferred: int
    average_wait: str
    average_handle: str
    average_first_response: Optional[str] = None
    average_response: Optional[str] = None


@dataclass(frozen=True)
class DailyPoint:
    date: str
    total: int
    answered: int
    abandoned: int
    transferred: int


@dataclass(frozen=True)
class HourlyPoint:
    hour: str
    total: int
    answered: int
    abandoned: int


@dataclass(frozen=True)
class HeatmapCell:
    weekday: str
    bucket: str
    count: int


@dataclass(frozen=True)
class RegionRollup:
    region: str
    macro_region: str
    total: int
    answered: int
    abandoned: int
    answer_rate: float
