from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from core.data import FrameLike, as_frame, format_currency, format_date
from core.filters import DashboardFilters
from core.models import (
    ACTIVE_JOB_STATUSES,
    DONE_JOB_STATUSES,
    UNKNOWN_COMPANY,
    Company,
    CompanyStatus,
    Job,
    JobStatus,
)

DESCRIPTION_PREVIEW_CHARS = 50


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def compute_company_rollup(company: Union[Company, Mapping[str, Any]], jobs: FrameLike) -> Dict[str, Any]:
    """Job activity of one company.

    Only active jobs contribute to ``total_estimated_value``. ``last_activity`` is the latest
    job update, or the company's own ``updated_at`` when it has no dated jobs.
    """
    if not isinstance(company, Company):
        company = Company.from_record(company)
    jobs_df = as_frame(jobs, Job)

    company_jobs = jobs_df[jobs_df["company_id"] == company.id]
    active = company_jobs[company_jobs["status"].isin(ACTIVE_JOB_STATUSES)]
    completed = company_jobs[company_jobs["status"].isin(DONE_JOB_STATUSES)]
    total_estimated_value = float(active["estimated_cost"].fillna(0).sum())

    last_activity: Optional[pd.Timestamp] = company_jobs["updated_at"].max() if not company_jobs.empty else None
    if last_activity is None or pd.isna(last_activity):
        last_activity = company.updated_at

    return {
        "company_id": company.id,
        "active_jobs": _records(active),
        "completed_jobs": _records(completed),
        "total_estimated_value": total_estimated_value,
        "last_activity": last_activity,
    }


def company_names(companies: FrameLike) -> Dict[str, str]:
    companies_df = as_frame(companies, Company)
    # a company without an id can never own a job
    companies_df = companies_df[companies_df["id"].fillna("").astype(str) != ""]
    names = companies_df.drop_duplicates(subset=["id"]).set_index("id")["name"]
    return {str(k): str(v) for k, v in names.items()}


def compute_company_activity(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    companies_df = as_frame(ctx.get("companies"), Company)
    jobs_df = as_frame(ctx.get("jobs"), Job)

    shown = companies_df
    if filters.selected_statuses:
        shown = shown[shown["status"].isin(filters.selected_statuses)]
    shown = shown.head(filters.top_n)

    rows = []
    for record in shown.to_dict(orient="records"):
        company = Company.from_record(record)
        rollup = compute_company_rollup(company, jobs_df)
        rows.append(
            {
                "id": company.id,
                "name": company.name,
                "status": company.status.value,
                "status_label": company.status.label,
                "motor_count": company.motor_count,
                "contact_name": company.contact_name,
                "active_jobs": len(rollup["active_jobs"]),
                "completed_jobs": len(rollup["completed_jobs"]),
                "total_estimated_value": rollup["total_estimated_value"],
                "total_estimated_value_display": format_currency(rollup["total_estimated_value"]),
                "last_activity": rollup["last_activity"],
                "last_activity_display": format_date(rollup["last_activity"]),
            }
        )

    return {
        "filters": asdict(filters),
        "total_companies": int(len(companies_df)),
        "active_companies": int(companies_df["status"].eq(CompanyStatus.ACTIVE.value).sum()),
        "empty": companies_df.empty,
        "companies": rows,
    }


def _preview(text: str) -> str:
    return text[:DESCRIPTION_PREVIEW_CHARS] + "..."


def compute_recent_activity(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    jobs_df = as_frame(ctx.get("jobs"), Job)
    names = company_names(ctx.get("companies"))

    items = []
    for record in jobs_df.head(filters.recent_limit).to_dict(orient="records"):
        job = Job.from_record(record)
        items.append(
            {
                "id": job.job_number,
                "company": names.get(job.company_id, UNKNOWN_COMPANY) if job.company_id else UNKNOWN_COMPANY,
                "status": job.status.value,
                "status_label": job.status.label,
                "date": format_date(job.updated_at),
                "description": _preview(job.description),
            }
        )

    return {
        "filters": asdict(filters),
        "items": items,
        "statuses": [s.value for s in JobStatus],
    }
