from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from callcore.cells import macro_region
from callcore.frames import outcome_counts, records_frame
from callcore.metrics_overview import ABANDONED, ANSWERED
from callcore.records import CanonicalRecord, QueueRollup, RegionRollup
from callcore.timeparse import round_half_up


def compute_region_rollups(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[RegionRollup]:
    df = records_frame(records, start_date=start_date, end_date=end_date)
    df = df[df["region"].notna()]
    counts = outcome_counts(df, "region")
    if counts.empty:
        return []

    rollups = []
    for region, row in counts.iterrows():
        total = int(row.sum())
        answered = int(row.get(ANSWERED, 0))
        rollups.append(
            RegionRollup(
                region=str(region),
                macro_region=macro_region(str(region)),
                total=total,
                answered=answered,
                abandoned=int(row.get(ABANDONED, 0)),
                answer_rate=answered / total * 100 if total else 0.0,
            )
        )
    return sorted(rollups, key=lambda r: r.total, reverse=True)


def _abandon_rate(queue: QueueRollup) -> float:
    return queue.abandoned / queue.total * 100 if queue.total else 0.0


def compute_insights(regions: Sequence[RegionRollup], queues: Sequence[QueueRollup]) -> List[str]:
    """Short readable observations over region and queue rollups."""
    insights: List[str] = []
    grand_total = sum(r.total for r in regions)

    if regions and grand_total:
        top = max(regions, key=lambda r: r.total)
        share = int(round_half_up(top.total / grand_total * 100))
        insights.append(f"{top.region} concentrated {share}% of calls, the largest volume of any region.")

        by_macro = {}
        for r in regions:
            by_macro[r.macro_region] = by_macro.get(r.macro_region, 0) + r.total
        if "Nordeste" in by_macro:
            share = int(round_half_up(by_macro["Nordeste"] / grand_total * 100))
            insights.append(f"The Nordeste region accounted for {share}% of total call volume.")

    if queues:
        best = min(queues, key=_abandon_rate)
        insights.append(f"Queue {best.queue} had the lowest abandon rate ({_abandon_rate(best):.1f}%).")

    if regions:
        worst = max(regions, key=lambda r: r.abandoned)
        if worst.abandoned > 0:
            insights.append(f"{worst.region} had the most abandoned calls; staffing there may need review.")

    return insights
