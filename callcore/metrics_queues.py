from __future__ import annotations

import numbers
from collections.abc import Mapping
from typing import Iterable, List, Optional, Sequence, Tuple

from callcore.frames import nonzero_average_seconds, outcome_counts, records_frame
from callcore.metrics_overview import ABANDONED, ANSWERED, TRANSFERRED
from callcore.records import CanonicalRecord, KpiSummary, QueueRollup, QueueSummaryRow
from callcore.timeparse import format_seconds, parse_duration, round_half_up


def compute_queue_rollups(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[QueueRollup]:
    df = records_frame(records, start_date=start_date, end_date=end_date)
    counts = outcome_counts(df, "queue")
    if counts.empty:
        return []

    rollups = []
    for queue, group in df.groupby("queue", sort=False):
        row = counts.loc[queue]
        rollups.append(
            QueueRollup(
                queue=str(queue),
                total=int(len(group)),
                answered=int(row.get(ANSWERED, 0)),
                abandoned=int(row.get(ABANDONED, 0)),
                transferred=int(row.get(TRANSFERRED, 0)),
                average_wait=format_seconds(nonzero_average_seconds(group["wait_seconds"])),
                average_handle=format_seconds(nonzero_average_seconds(group["handle_seconds"])),
            )
        )
    return sorted(rollups, key=lambda r: r.total, reverse=True)


def _field(row: object, name: str) -> object:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _as_seconds(value: object) -> int:
    # Parsed summary rows already hold whole seconds; anything else is a raw cell.
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return int(value)
    return parse_duration(value).seconds


def _as_weight(value: object) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def compute_weighted_average(rows: Sequence[object], weight_field: str, value_field: str) -> str:
    """Average ``value_field`` weighted by ``weight_field`` as ``HH:MM:SS``.

    Rows with no weight or no duration are left out entirely.
    """
    total_seconds = 0.0
    total_weight = 0.0
    for row in rows:
        weight = _as_weight(_field(row, weight_field))
        seconds = _as_seconds(_field(row, value_field))
        if weight > 0 and seconds > 0:
            total_seconds += seconds * weight
            total_weight += weight
    if total_weight == 0:
        return "00:00:00"
    return format_seconds(int(round_half_up(total_seconds / total_weight)))


def compute_ticket_summary(
    rows: Sequence[QueueSummaryRow],
    *,
    period: str = "",
) -> Tuple[KpiSummary, List[QueueRollup]]:
    """KPIs and queue lines for a pre-aggregated ticket export.

    Every ticket in these reports is closed, so it counts as answered and
    nothing is abandoned.
    """
    total = sum(max(r.tickets, 0) for r in rows)
    kpis = KpiSummary(
        total=total,
        answered=total,
        abandoned=0,
        transferred=0,
        answer_rate=100.0 if total > 0 else 0.0,
        abandon_rate=0.0,
        average_wait=compute_weighted_average(rows, "tickets", "wait_seconds"),
        average_handle=compute_weighted_average(rows, "tickets", "handle_seconds"),
        period=period,
    )
    queues = [
        QueueRollup(
            queue=r.queue,
            total=r.tickets,
            answered=r.tickets,
            abandoned=0,
            transferred=0,
            average_wait=format_seconds(r.wait_seconds),
            average_handle=format_seconds(r.handle_seconds),
            average_first_response=format_seconds(r.first_response_seconds),
            average_response=format_seconds(r.response_seconds),
        )
        for r in rows
    ]
    return kpis, queues
