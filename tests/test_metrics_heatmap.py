from datetime import datetime, timedelta

from callcore.metrics_heatmap import WEEKDAYS, compute_heatmap, heatmap_bucket, heatmap_rows


def test_bucket_edges():
    assert heatmap_bucket(5) is None
    assert heatmap_bucket(6) == "06-08"
    assert heatmap_bucket(7) == "06-08"
    assert heatmap_bucket(8) == "08-10"
    assert heatmap_bucket(17) == "16-18"
    assert heatmap_bucket(18) is None
    assert heatmap_bucket(None) is None


def test_grid_shape_and_total(record):
    monday = datetime(2025, 10, 6)
    records = [record(str(h), started_at=monday + timedelta(days=h % 7, hours=h)) for h in range(24)]
    records.append(record("undated"))
    grid = compute_heatmap(records)

    cells = [c for row in grid for c in row]
    assert len(grid) == 6 and all(len(row) == 7 for row in grid)
    assert len(cells) == 42
    assert all(isinstance(c.count, int) and c.count >= 0 for c in cells)
    assert sum(c.count for c in cells) == 12
    assert [c.weekday for c in grid[0]] == WEEKDAYS


def test_cell_placement(record):
    saturday_nine = datetime(2025, 10, 11, 9, 30)
    grid = compute_heatmap([record("1", started_at=saturday_nine), record("2", started_at=saturday_nine)])
    assert grid[1][5].bucket == "08-10"
    assert grid[1][5].weekday == "Sat"
    assert grid[1][5].count == 2


def test_empty_grid_still_dense():
    grid = compute_heatmap([])
    assert sum(len(row) for row in grid) == 42
    assert heatmap_rows(grid)[0] == {"bucket": "06-08", **{d: 0 for d in WEEKDAYS}}
