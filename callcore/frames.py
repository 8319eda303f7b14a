from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from callcore.records import CanonicalRecord
from callcore.store import filter_window
from callcore.timeparse import calendar_day, round_half_up

FRAME_COLUMNS = [
    "id",
    "queue",
    "outcome",
    "started_at",
    "day",
    "hour",
    "weekday",
    "wait_seconds",
    "handle_seconds",
    "operator",
    "extension",
    "region",
]


def records_frame(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> pd.DataFrame:
    """Flatten records into one row each; derived day/hour/weekday are NA when undated."""
    rows = []
    for r in filter_window(records, start_date, end_date):
        when = r.started_at
        rows.append(
            {
                "id": r.id,
                "queue": r.queue,
                "outcome": r.outcome.value,
                "started_at": when,
                "day": calendar_day(when),
                "hour": when.hour if when else None,
                "weekday": when.weekday() if when else None,
                "wait_seconds": int(r.wait_seconds),
                "handle_seconds": int(r.handle_seconds),
                "operator": r.operator,
                "extension": r.extension,
                "region": r.region,
            }
        )
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["hour"] = df["hour"].astype("Int64")
    df["weekday"] = df["weekday"].astype("Int64")
    return df


def dated(df: pd.DataFrame) -> pd.DataFrame:
    return df.dropna(subset=["day"])


def nonzero_average_seconds(values: pd.Series) -> int:
    """Mean over strictly positive durations; zeros are "not measured", not fast."""
    s = pd.to_numeric(values, errors="coerce")
    s = s[s > 0]
    if s.empty:
        return 0
    return int(round_half_up(float(s.sum()) / len(s)))


def outcome_counts(df: pd.DataFrame, by: str) -> pd.DataFrame:
    """Per-``by`` counts with one column per outcome label (missing outcomes absent)."""
    if df.empty:
        return pd.DataFrame()
    return df.groupby([by, "outcome"], sort=False).size().unstack(fill_value=0)
