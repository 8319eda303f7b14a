from __future__ import annotations

from typing import Iterable, List, Optional

from callcore.frames import nonzero_average_seconds, records_frame
from callcore.records import CanonicalRecord, OperatorRollup, Outcome
from callcore.timeparse import format_seconds, round_half_up


def compute_operator_rollups(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[OperatorRollup]:
    """Rank operators by answered contacts.

    Only answered records with an operator count. The busiest queue is the
    most frequent one, ties going to the queue seen first; the per-day
    average divides by the number of distinct days the operator answered on.
    """
    df = records_frame(records, start_date=start_date, end_date=end_date)
    answered = df[(df["outcome"] == Outcome.ANSWERED.value) & df["operator"].notna()]
    if answered.empty:
        return []

    rollups = []
    for operator, group in answered.groupby("operator", sort=False):
        queue_counts = group.groupby("queue", sort=False).size()
        days_worked = group["day"].dropna().nunique()
        count = int(len(group))
        extensions = [str(e) for e in group["extension"].dropna().unique()]
        rollups.append(
            OperatorRollup(
                operator=str(operator),
                answered=count,
                average_handle=format_seconds(nonzero_average_seconds(group["handle_seconds"])),
                average_wait=format_seconds(nonzero_average_seconds(group["wait_seconds"])),
                busiest_queue=str(queue_counts.idxmax()) if not queue_counts.empty else "N/A",
                per_day_average=int(round_half_up(count / days_worked)) if days_worked else 0,
                extensions="/".join(extensions),
            )
        )
    return sorted(rollups, key=lambda r: r.answered, reverse=True)
