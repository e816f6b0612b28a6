from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.data import FrameLike, as_frame, capture_now
from core.filters import DashboardFilters, Thresholds
from core.models import ACTIVE_JOB_STATUSES, Invoice, InvoiceStatus, Job, Warranty, WarrantyStatus

ALL_CLEAR = {
    "message": "All caught up!",
    "detail": "No urgent items require attention",
}


def _within(series: pd.Series, start: pd.Timestamp, end: pd.Timestamp) -> pd.Series:
    # NaT compares False on both sides, so undated rows drop out here
    return series.ge(start) & series.le(end)


def compute_alerts(
    jobs: FrameLike,
    invoices: FrameLike,
    warranties: FrameLike,
    now: object,
    thresholds: Optional[Thresholds] = None,
) -> Dict[str, Any]:
    thresholds = thresholds or Thresholds()
    now = capture_now(now)
    jobs_df = as_frame(jobs, Job)
    invoices_df = as_frame(invoices, Invoice)
    warranties_df = as_frame(warranties, Warranty)

    week_end = now + pd.Timedelta(days=thresholds.job_due_days)
    jobs_due_this_week = int(
        (_within(jobs_df["due_date"], now, week_end) & jobs_df["status"].isin(ACTIVE_JOB_STATUSES)).sum()
    )

    overdue_invoices = int(
        (invoices_df["due_date"].lt(now) & invoices_df["status"].ne(InvoiceStatus.PAID.value)).sum()
    )

    expiry_end = now + pd.Timedelta(days=thresholds.warranty_expiry_days)
    warranties_expiring_soon = int(
        (
            _within(warranties_df["warranty_end"], now, expiry_end)
            & warranties_df["status"].eq(WarrantyStatus.ACTIVE.value)
        ).sum()
    )

    alerts: List[Dict[str, Any]] = []
    if jobs_due_this_week > 0:
        alerts.append(
            {
                "alert_type": "Jobs Due",
                "severity": "medium",
                "count": jobs_due_this_week,
                "message": f"{jobs_due_this_week} jobs due this week",
                "action": "Review upcoming deadlines",
            }
        )
    if overdue_invoices > 0:
        alerts.append(
            {
                "alert_type": "Overdue Invoices",
                "severity": "high",
                "count": overdue_invoices,
                "message": f"{overdue_invoices} invoices overdue",
                "action": "Follow up on payments",
            }
        )
    if warranties_expiring_soon > 0:
        alerts.append(
            {
                "alert_type": "Warranties Expiring",
                "severity": "low",
                "count": warranties_expiring_soon,
                "message": f"{warranties_expiring_soon} warranties expiring soon",
                "action": "Consider renewals",
            }
        )

    has_alerts = bool(alerts)
    return {
        "jobs_due_this_week": jobs_due_this_week,
        "overdue_invoices": overdue_invoices,
        "warranties_expiring_soon": warranties_expiring_soon,
        "has_alerts": has_alerts,
        "alerts": alerts,
        "all_clear": None if has_alerts else dict(ALL_CLEAR),
    }


def compute_alerts_panel(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    summary = compute_alerts(
        ctx.get("jobs"),
        ctx.get("invoices"),
        ctx.get("warranties"),
        ctx["now"],
        filters.thresholds,
    )
    return {"filters": asdict(filters), "now": ctx["now"], **summary}
