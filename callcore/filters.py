from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DashboardFilters:
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    selected_queues: List[str] = field(default_factory=list)
    selected_operators: List[str] = field(default_factory=list)
    top_n: int = 15

    @property
    def has_window(self) -> bool:
        return bool(self.start_date and self.end_date)


def _as_day(value: object) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()[:10]
    return s if _ISO_DAY.match(s) else None


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def normalize_filters(raw: dict) -> DashboardFilters:
    start_date = _as_day(raw.get("start_date"))
    end_date = _as_day(raw.get("end_date"))
    # A half-open window means "whole dataset".
    if not (start_date and end_date):
        start_date = end_date = None
    elif start_date > end_date:
        start_date, end_date = end_date, start_date

    top_n = raw.get("top_n", 15)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = 15
    top_n = max(1, min(200, top_n))

    return DashboardFilters(
        start_date=start_date,
        end_date=end_date,
        selected_queues=_as_str_list(raw.get("selected_queues")),
        selected_operators=_as_str_list(raw.get("selected_operators")),
        top_n=top_n,
    )
