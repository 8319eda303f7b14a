from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from callcore.frames import dated, records_frame
from callcore.records import CanonicalRecord, HeatmapCell

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# [start, end) hours of each bucket row.
BUCKETS: List[Tuple[int, int]] = [(6, 8), (8, 10), (10, 12), (12, 14), (14, 16), (16, 18)]


def bucket_label(bucket: Tuple[int, int]) -> str:
    start, end = bucket
    return f"{start:02d}-{end:02d}"


def heatmap_bucket(hour: Optional[int]) -> Optional[str]:
    if hour is None:
        return None
    for bucket in BUCKETS:
        if bucket[0] <= hour < bucket[1]:
            return bucket_label(bucket)
    return None


def compute_heatmap(
    records: Iterable[CanonicalRecord],
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[List[HeatmapCell]]:
    """Contacts per two-hour bucket and weekday.

    Always six rows (``06-08`` to ``16-18``) of seven cells (Mon..Sun).
    Contacts outside 06:00-18:00 or without a start time are left out.
    """
    df = dated(records_frame(records, start_date=start_date, end_date=end_date))
    counts: Dict[Tuple[str, int], int] = {}
    if not df.empty:
        df = df.assign(bucket=[heatmap_bucket(int(h)) for h in df["hour"]])
        df = df[df["bucket"].notna()]
        if not df.empty:
            sizes = df.groupby(["bucket", "weekday"]).size()
            counts = {(str(b), int(w)): int(n) for (b, w), n in sizes.items()}

    grid = []
    for bucket in BUCKETS:
        label = bucket_label(bucket)
        grid.append(
            [HeatmapCell(weekday=name, bucket=label, count=counts.get((label, i), 0)) for i, name in enumerate(WEEKDAYS)]
        )
    return grid


def heatmap_rows(grid: List[List[HeatmapCell]]) -> List[dict]:
    """Flatten the grid to one dict per bucket, weekdays as keys."""
    rows = []
    for cells in grid:
        row = {"bucket": cells[0].bucket if cells else ""}
        for cell in cells:
            row[cell.weekday] = cell.count
        rows.append(row)
    return rows
