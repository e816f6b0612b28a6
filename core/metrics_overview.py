from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.charts import jobs_by_status_chart, to_vega_spec
from core.data import FrameLike, as_frame, capture_now, format_currency, format_long_date
from core.filters import DashboardFilters
from core.models import Company, CompanyStatus, Invoice, InvoiceStatus, Job


def _in_month(series: pd.Series, now: pd.Timestamp) -> pd.Series:
    # NaT never matches
    return (series.dt.year == now.year) & (series.dt.month == now.month)


def compute_headline_metrics(
    companies: FrameLike,
    jobs: FrameLike,
    invoices: FrameLike,
    now: object,
) -> Dict[str, Any]:
    now = capture_now(now)
    companies_df = as_frame(companies, Company)
    jobs_df = as_frame(jobs, Job)
    invoices_df = as_frame(invoices, Invoice)

    active_companies = int(companies_df["status"].eq(CompanyStatus.ACTIVE.value).sum())
    total_motors = int(companies_df["motor_count"].fillna(0).sum())
    jobs_this_month = int(_in_month(jobs_df["created_at"], now).sum())

    paid = invoices_df[
        invoices_df["status"].eq(InvoiceStatus.PAID.value)
        & invoices_df["paid_date"].notna()
        & _in_month(invoices_df["paid_date"], now)
    ]
    monthly_revenue = float(paid["total_amount"].fillna(0).sum())

    return {
        "active_companies": active_companies,
        "total_motors": total_motors,
        "jobs_this_month": jobs_this_month,
        "monthly_revenue": monthly_revenue,
    }


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    now: pd.Timestamp = ctx["now"]
    jobs_df: pd.DataFrame = ctx.get("jobs", pd.DataFrame())
    headline = compute_headline_metrics(ctx.get("companies"), jobs_df, ctx.get("invoices"), now)

    cards = [
        {"key": "active_companies", "title": "Active Companies", "value": str(headline["active_companies"])},
        {"key": "total_motors", "title": "Motors in Database", "value": str(headline["total_motors"])},
        {"key": "jobs_this_month", "title": "Jobs This Month", "value": str(headline["jobs_this_month"])},
        {"key": "monthly_revenue", "title": "Monthly Revenue", "value": format_currency(headline["monthly_revenue"])},
    ]

    chart = jobs_by_status_chart(as_frame(jobs_df, Job))
    return {
        "filters": asdict(filters),
        "now": now,
        "welcome_date": format_long_date(now),
        "headline": headline,
        "cards": cards,
        "jobs_by_status_chart": to_vega_spec(chart) if chart is not None else None,
    }
