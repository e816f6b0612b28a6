from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, MetaStatusesResponse
from core.data import capture_now, load_dashboard_data, prepare_context
from core.filters import DashboardFilters, normalize_filters
from core.metrics_alerts import compute_alerts_panel
from core.metrics_companies import compute_company_activity, compute_recent_activity
from core.metrics_overview import compute_overview
from core.models import CompanyStatus, InvoiceStatus, JobStatus, WarrantyStatus


app = FastAPI(title="Workshop Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORTABLE = ("companies", "jobs", "invoices", "warranties")


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

    def _timestamp(ts: pd.Timestamp) -> str | None:
        return None if pd.isna(ts) else ts.isoformat()

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: _timestamp,
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/meta/statuses", response_model=MetaStatusesResponse)
def meta_statuses():
    return MetaStatusesResponse(
        company=[s.value for s in CompanyStatus],
        job=[s.value for s in JobStatus],
        invoice=[s.value for s in InvoiceStatus],
        warranty=[s.value for s in WarrantyStatus],
    )


def _reference_time(now: Optional[str]) -> pd.Timestamp:
    return capture_now(now or None)


@app.post("/overview")
def overview(filters: DashboardFiltersModel, now: Optional[str] = Query(default=None)):
    try:
        ref = _reference_time(now)
    except ValueError as exc:
        return _error(exc, status_code=400)
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data(), now=ref)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/companies/activity")
def company_activity(filters: DashboardFiltersModel, now: Optional[str] = Query(default=None)):
    try:
        ref = _reference_time(now)
    except ValueError as exc:
        return _error(exc, status_code=400)
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data(), now=ref)
        return _json(compute_company_activity(f, ctx))
    except Exception as exc:
        logger.exception("company_activity failed")
        return _error(exc)


@app.post("/recent-activity")
def recent_activity(filters: DashboardFiltersModel, now: Optional[str] = Query(default=None)):
    try:
        ref = _reference_time(now)
    except ValueError as exc:
        return _error(exc, status_code=400)
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data(), now=ref)
        return _json(compute_recent_activity(f, ctx))
    except Exception as exc:
        logger.exception("recent_activity failed")
        return _error(exc)


@app.post("/alerts")
def alerts(filters: DashboardFiltersModel, now: Optional[str] = Query(default=None)):
    try:
        ref = _reference_time(now)
    except ValueError as exc:
        return _error(exc, status_code=400)
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data(), now=ref)
        return _json(compute_alerts_panel(f, ctx))
    except Exception as exc:
        logger.exception("alerts failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str):
    if page not in EXPORTABLE:
        return JSONResponse(status_code=404, content={"error": f"unknown export {page!r}", "type": "KeyError"})
    try:
        export_df = load_dashboard_data().get(page)
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)

    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={page}.csv"})
