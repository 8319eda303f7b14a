from __future__ import annotations

from typing import Iterable, List, Optional

from callcore.frames import dated, nonzero_average_seconds, outcome_counts, records_frame
from callcore.records import CanonicalRecord, DailyPoint, HourlyPoint, KpiSummary, Outcome
from callcore.store import filter_window
from callcore.timeparse import format_seconds

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

ANSWERED = Outcome.ANSWERED.value
ABANDONED = Outcome.ABANDONED.value
TRANSFERRED = Outcome.TRANSFERRED.value


def _pct(part: int, total: int) -> float:
    return part / total * 100 if total else 0.0


def _day_month_year(iso_day: str) -> str:
    year, month, day = iso_day.split("-")
    return f"{day}/{month}/{year}"


def compute_period_label(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> str:
    if start_date and end_date:
        return f"{_day_month_year(start_date)} - {_day_month_year(end_date)}"
    instants = [r.started_at for r in records if r.started_at is not None]
    if not instants:
        return ""
    first, last = min(instants), max(instants)
    return f"{MONTH_ABBR[first.month - 1]}/{first.year} - {MONTH_ABBR[last.month - 1]}/{last.year}"


def compute_kpis(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> KpiSummary:
    records = filter_window(records, start_date, end_date)
    df = records_frame(records)
    total = int(len(df))
    counts = df["outcome"].value_counts()
    answered = int(counts.get(ANSWERED, 0))
    abandoned = int(counts.get(ABANDONED, 0))
    transferred = int(counts.get(TRANSFERRED, 0))
    return KpiSummary(
        total=total,
        answered=answered,
        abandoned=abandoned,
        transferred=transferred,
        answer_rate=_pct(answered, total),
        abandon_rate=_pct(abandoned, total),
        average_wait=format_seconds(nonzero_average_seconds(df["wait_seconds"])),
        average_handle=format_seconds(nonzero_average_seconds(df["handle_seconds"])),
        period=compute_period_label(records, start_date=start_date, end_date=end_date),
    )


def compute_daily_series(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[DailyPoint]:
    df = dated(records_frame(records, start_date=start_date, end_date=end_date))
    counts = outcome_counts(df, "day")
    if counts.empty:
        return []
    return [
        DailyPoint(
            date=str(day),
            total=int(row.sum()),
            answered=int(row.get(ANSWERED, 0)),
            abandoned=int(row.get(ABANDONED, 0)),
            transferred=int(row.get(TRANSFERRED, 0)),
        )
        for day, row in counts.sort_index().iterrows()
    ]


def compute_hourly_series(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[HourlyPoint]:
    """One point per hour of day, 00:00 through 23:00, zero-filled."""
    df = dated(records_frame(records, start_date=start_date, end_date=end_date))
    counts = outcome_counts(df.assign(hour=df["hour"].astype(int)), "hour") if not df.empty else None
    points = []
    for hour in range(24):
        row = counts.loc[hour] if counts is not None and hour in counts.index else None
        points.append(
            HourlyPoint(
                hour=f"{hour:02d}:00",
                total=int(row.sum()) if row is not None else 0,
                answered=int(row.get(ANSWERED, 0)) if row is not None else 0,
                abandoned=int(row.get(ABANDONED, 0)) if row is not None else 0,
            )
        )
    return points
