from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from callcore.records import DailyPoint, HeatmapCell, HourlyPoint, OperatorRollup

alt.data_transformers.disable_max_rows()

OUTCOME_COLORS = alt.Scale(
    domain=["answered", "abandoned", "transferred"],
    range=["#2e7d32", "#c62828", "#f9a825"],
)


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def daily_volume_chart(points: Sequence[DailyPoint]) -> Dict[str, Any]:
    df = pd.DataFrame([asdict(p) for p in points], columns=["date", "total", "answered", "abandoned", "transferred"])
    long = df.melt(id_vars=["date"], value_vars=["answered", "abandoned", "transferred"], var_name="outcome", value_name="calls")
    hover = alt.selection_point(fields=["outcome"], on="mouseover", empty="all")
    chart = (
        alt.Chart(long)
        .mark_line(point={"filled": True, "size": 50})
        .encode(
            x=alt.X("date:T", title="Day", axis=alt.Axis(format="%d/%m", grid=False)),
            y=alt.Y("calls:Q", title="Calls", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("outcome:N", scale=OUTCOME_COLORS),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["date:T", "outcome:N", alt.Tooltip("calls:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=260)
    )
    return to_vega_spec(chart)


def hourly_chart(points: Sequence[HourlyPoint]) -> Dict[str, Any]:
    df = pd.DataFrame([asdict(p) for p in points], columns=["hour", "total", "answered", "abandoned"])
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("hour:O", title="Hour", sort=None),
            y=alt.Y("total:Q", title="Calls"),
            tooltip=["hour", "total", "answered", "abandoned"],
        )
        .properties(height=220)
    )
    return to_vega_spec(chart)


def heatmap_chart(grid: List[List[HeatmapCell]]) -> Dict[str, Any]:
    df = pd.DataFrame([asdict(c) for row in grid for c in row], columns=["weekday", "bucket", "count"])
    weekdays = list(dict.fromkeys(df["weekday"])) if not df.empty else []
    chart = (
        alt.Chart(df)
        .mark_rect()
        .encode(
            x=alt.X("weekday:O", title=None, sort=weekdays),
            y=alt.Y("bucket:O", title=None),
            color=alt.Color("count:Q", scale=alt.Scale(scheme="blues"), title="Calls"),
            tooltip=["weekday", "bucket", "count"],
        )
        .properties(height=240)
    )
    return to_vega_spec(chart)


def operator_ranking_chart(rollups: Sequence[OperatorRollup], top_n: int) -> Dict[str, Any]:
    df = pd.DataFrame([asdict(r) for r in rollups[:top_n]], columns=["operator", "answered", "busiest_queue"])
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("answered:Q", title="Answered"),
            y=alt.Y("operator:N", sort="-x", title=None),
            tooltip=["operator", "answered", "busiest_queue"],
        )
        .properties(height=max(120, 22 * len(df)))
    )
    return to_vega_spec(chart)
