from __future__ import annotations

import logging
import math
from datetime import datetime

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from callapi.schemas import DashboardFiltersModel, ErrorResponse
from callcore.dashboard import (
    compute_heatmap_page,
    compute_operators,
    compute_overview,
    compute_queues,
    compute_regions,
    compute_tickets,
    export_rows,
)
from callcore.data import fallback_errors, load_dashboard_data, load_state, prepare_context
from callcore.filters import DashboardFilters, normalize_filters
from callcore.records import StructuralError

app = FastAPI(title="Call Center Analytics API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORTS = {
    "overview": compute_overview,
    "operators": compute_operators,
    "queues": compute_queues,
    "heatmap": compute_heatmap_page,
    "regions": compute_regions,
}


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
                datetime: lambda dt: dt.isoformat(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    if isinstance(exc, StructuralError):
        logger.warning("%s rejected input: %s", name, exc)
        body = ErrorResponse(error=str(exc), type=type(exc).__name__, errors=exc.errors)
        return JSONResponse(status_code=422, content=body.model_dump())
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _page(name: str, compute, filters: DashboardFiltersModel) -> JSONResponse:
    try:
        dataset = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, dataset)
        payload = compute(f, ctx)
        payload["fallback_errors"] = fallback_errors(load_state())
        return _json(payload)
    except Exception as exc:
        return _error(name, exc)


@app.get("/meta/queues")
def meta_queues():
    try:
        ctx = prepare_context({}, load_dashboard_data())
        return _json({"queues": ctx["queues"]})
    except Exception as exc:
        return _error("meta_queues", exc)


@app.get("/meta/operators")
def meta_operators():
    try:
        ctx = prepare_context({}, load_dashboard_data())
        return _json({"operators": ctx["operators"]})
    except Exception as exc:
        return _error("meta_operators", exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    return _page("overview", compute_overview, filters)


@app.post("/operators")
def operators(filters: DashboardFiltersModel):
    return _page("operators", compute_operators, filters)


@app.post("/queues")
def queues(filters: DashboardFiltersModel):
    return _page("queues", compute_queues, filters)


@app.post("/heatmap")
def heatmap(filters: DashboardFiltersModel):
    return _page("heatmap", compute_heatmap_page, filters)


@app.post("/regions")
def regions(filters: DashboardFiltersModel):
    return _page("regions", compute_regions, filters)


@app.get("/tickets")
def tickets():
    try:
        ctx = prepare_context({}, load_dashboard_data())
        return _json(compute_tickets(ctx))
    except Exception as exc:
        return _error("tickets", exc)


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    try:
        dataset = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, dataset)
        compute = EXPORTS.get(page)
        export_df = export_rows(page, compute(f, ctx)) if compute else pd.DataFrame()
    except Exception as exc:
        return _error("export", exc)

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={page}.csv"})
