from callcore.metrics_queues import compute_queue_rollups, compute_ticket_summary, compute_weighted_average
from callcore.records import Outcome, QueueSummaryRow


def test_queue_rollup_scenario(record):
    records = [
        record("1", handle=30),
        record("2", handle=60),
        record("3", Outcome.ABANDONED),
    ]
    (row,) = compute_queue_rollups(records)
    assert (row.queue, row.total, row.answered, row.abandoned, row.transferred) == ("A", 3, 2, 1, 0)
    assert row.average_handle == "00:00:45"
    assert row.average_wait == "00:00:00"


def test_sorted_by_total(record):
    records = [record("1", queue="small"), record("2", queue="big"), record("3", queue="big")]
    assert [r.queue for r in compute_queue_rollups(records)] == ["big", "small"]


def test_weighted_average_excludes_zero_weight():
    rows = [
        {"count": 10, "duration": "00:01:00"},
        {"count": 0, "duration": "00:05:00"},
    ]
    assert compute_weighted_average(rows, "count", "duration") == "00:01:00"


def test_weighted_average_excludes_zero_duration_and_handles_objects():
    rows = [
        QueueSummaryRow("A", tickets=3, wait_seconds=60),
        QueueSummaryRow("B", tickets=1, wait_seconds=180),
        QueueSummaryRow("C", tickets=50, wait_seconds=0),
    ]
    assert compute_weighted_average(rows, "tickets", "wait_seconds") == "00:01:30"


def test_weighted_average_no_weight():
    assert compute_weighted_average([], "tickets", "wait_seconds") == "00:00:00"
    assert compute_weighted_average([{"w": 0, "v": "00:01:00"}], "w", "v") == "00:00:00"


def test_ticket_summary():
    rows = [
        QueueSummaryRow("Suporte", tickets=10, first_response_seconds=30, wait_seconds=60, response_seconds=40, handle_seconds=240),
        QueueSummaryRow("Vendas", tickets=0, wait_seconds=300, handle_seconds=120),
    ]
    kpis, queues = compute_ticket_summary(rows, period="October 2025")
    assert kpis.total == 10 and kpis.answered == 10 and kpis.abandoned == 0
    assert kpis.answer_rate == 100.0
    assert kpis.average_wait == "00:01:00"
    assert kpis.average_handle == "00:04:00"
    assert kpis.period == "October 2025"
    assert queues[0].average_first_response == "00:00:30"
    assert queues[0].average_response == "00:00:40"
    assert queues[1].total == 0


def test_ticket_summary_empty():
    kpis, queues = compute_ticket_summary([])
    assert kpis.total == 0 and kpis.answer_rate == 0.0
    assert queues == []
