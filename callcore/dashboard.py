from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from callcore.charts import daily_volume_chart, heatmap_chart, hourly_chart, operator_ranking_chart
from callcore.data import prepare_context
from callcore.filters import DashboardFilters
from callcore.metrics_heatmap import compute_heatmap, heatmap_rows
from callcore.metrics_operators import compute_operator_rollups
from callcore.metrics_overview import compute_daily_series, compute_hourly_series, compute_kpis
from callcore.metrics_queues import compute_queue_rollups, compute_ticket_summary
from callcore.metrics_regions import compute_insights, compute_region_rollups
from callcore.store import Dataset


def _window(filters: DashboardFilters) -> Dict[str, Any]:
    return {"start_date": filters.start_date, "end_date": filters.end_date}


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = ctx.get("records", ())
    kpis = compute_kpis(records, **_window(filters))
    daily = compute_daily_series(records, **_window(filters))
    hourly = compute_hourly_series(records, **_window(filters))
    return {
        "filters": asdict(filters),
        "source": ctx.get("source", ""),
        "kpis": asdict(kpis),
        "daily": [asdict(p) for p in daily],
        "hourly": [asdict(p) for p in hourly],
        "charts": {"daily_volume": daily_volume_chart(daily), "hourly": hourly_chart(hourly)},
        "diagnostics": {
            "files": ctx.get("files", []),
            "skipped_rows": ctx.get("skipped_rows", 0),
            "unparsed_fields": ctx.get("unparsed_fields", 0),
        },
    }


def compute_operators(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rollups = compute_operator_rollups(ctx.get("records", ()), **_window(filters))
    return {
        "filters": asdict(filters),
        "operators": [asdict(r) for r in rollups],
        "charts": {"ranking": operator_ranking_chart(rollups, filters.top_n)} if rollups else {},
    }


def compute_queues(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rollups = compute_queue_rollups(ctx.get("records", ()), **_window(filters))
    return {"filters": asdict(filters), "queues": [asdict(r) for r in rollups]}


def compute_heatmap_page(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    grid = compute_heatmap(ctx.get("records", ()), **_window(filters))
    return {
        "filters": asdict(filters),
        "heatmap": [[asdict(c) for c in row] for row in grid],
        "rows": heatmap_rows(grid),
        "charts": {"heatmap": heatmap_chart(grid)},
    }


def compute_regions(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = ctx.get("records", ())
    regions = compute_region_rollups(records, **_window(filters))
    queues = compute_queue_rollups(records, **_window(filters))
    return {
        "filters": asdict(filters),
        "regions": [asdict(r) for r in regions],
        "insights": compute_insights(regions, queues),
    }


def compute_tickets(ctx: Dict[str, Any]) -> Dict[str, Any]:
    kpis, queues = compute_ticket_summary(ctx.get("summary_rows", ()), period=ctx.get("period") or "")
    return {"kpis": asdict(kpis), "queues": [asdict(q) for q in queues]}


def compute_dashboard(filters: DashboardFilters, dataset: Dataset) -> Dict[str, Any]:
    """Every page payload for one filter state."""
    ctx = prepare_context(filters, dataset)
    filt = ctx["filters"]
    overview = compute_overview(filt, ctx)
    heatmap = compute_heatmap_page(filt, ctx)
    return {
        "filters": asdict(filt),
        "source": ctx["source"],
        "kpis": overview["kpis"],
        "daily": overview["daily"],
        "hourly": overview["hourly"],
        "operators": compute_operators(filt, ctx)["operators"],
        "queues": compute_queues(filt, ctx)["queues"],
        "heatmap": heatmap["heatmap"],
        **{k: v for k, v in compute_regions(filt, ctx).items() if k != "filters"},
        "tickets": compute_tickets(ctx),
        "charts": {"daily_volume": overview["charts"]["daily_volume"], "heatmap": heatmap["charts"]["heatmap"]},
        "diagnostics": overview["diagnostics"],
    }


def export_rows(page: str, payload: Dict[str, Any]) -> pd.DataFrame:
    """Tabular view of a page payload for CSV export."""
    tables: Dict[str, List[Dict[str, Any]]] = {
        "overview": payload.get("daily", []),
        "operators": payload.get("operators", []),
        "queues": payload.get("queues", []),
        "heatmap": payload.get("rows", []),
        "regions": payload.get("regions", []),
    }
    if page not in tables:
        raise KeyError(page)
    return pd.DataFrame(tables[page])
