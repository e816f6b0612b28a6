"""Per-company rollups, the activity list and recent jobs."""

import pandas as pd

from core.data import prepare_context
from core.filters import DashboardFilters
from core.metrics_companies import (
    compute_company_activity,
    compute_company_rollup,
    compute_recent_activity,
)
from core.models import UNKNOWN_COMPANY, Company, Job


def test_rollup_splits_active_and_completed():
    company = Company.from_record({"id": "c1", "updated_at": "2024-01-01"})
    jobs = [
        {"id": "a", "company_id": "c1", "status": "pending", "estimated_cost": 100, "updated_at": "2024-03-01"},
        {"id": "b", "company_id": "c1", "status": "completed", "estimated_cost": 200, "updated_at": "2024-03-05"},
    ]
    rollup = compute_company_rollup(company, jobs)
    assert len(rollup["active_jobs"]) == 1
    assert len(rollup["completed_jobs"]) == 1
    assert rollup["total_estimated_value"] == 100.0
    assert rollup["last_activity"] == pd.Timestamp("2024-03-05")


def test_rollup_missing_cost_counts_as_zero(companies, jobs):
    harbor = companies[1]
    rollup = compute_company_rollup(harbor, jobs)
    assert len(rollup["active_jobs"]) == 1
    assert rollup["total_estimated_value"] == 0.0


def test_rollup_without_jobs_falls_back_to_company_update(companies, jobs):
    delta = companies[2]
    rollup = compute_company_rollup(delta, jobs)
    assert rollup["active_jobs"] == []
    assert rollup["completed_jobs"] == []
    assert rollup["total_estimated_value"] == 0.0
    assert rollup["last_activity"] == pd.Timestamp("2024-03-02T08:00:00")


def test_rollup_delivered_counts_as_completed():
    company = {"id": "c1"}
    jobs = [Job.from_record({"id": "a", "company_id": "c1", "status": "delivered", "estimated_cost": 40})]
    rollup = compute_company_rollup(company, jobs)
    assert len(rollup["completed_jobs"]) == 1
    assert rollup["total_estimated_value"] == 0.0


def test_rollup_ignores_unknown_job_status():
    jobs = [{"id": "a", "company_id": "c1", "status": "on_hold", "estimated_cost": 40}]
    rollup = compute_company_rollup({"id": "c1"}, jobs)
    assert rollup["active_jobs"] == []
    assert rollup["completed_jobs"] == []


def _ctx(companies, jobs, now, **filters):
    return prepare_context(filters or None, {"companies": companies, "jobs": jobs}, now=now)


def test_company_activity_rows(companies, jobs, now):
    ctx = _ctx(companies, jobs, now)
    payload = compute_company_activity(ctx["filters"], ctx)
    assert payload["total_companies"] == 3
    assert payload["empty"] is False
    acme = payload["companies"][0]
    assert acme["name"] == "Acme Pumps"
    assert acme["active_jobs"] == 1
    assert acme["completed_jobs"] == 1
    assert acme["total_estimated_value"] == 100.0
    assert acme["total_estimated_value_display"] == "$100"
    assert acme["last_activity_display"] == "3/12/2024"
    assert acme["contact_name"] == "Dana Reyes"


def test_company_activity_respects_top_n_and_status(companies, jobs, now):
    ctx = _ctx(companies, jobs, now)
    limited = compute_company_activity(DashboardFilters(top_n=1), ctx)
    assert [c["id"] for c in limited["companies"]] == ["c1"]

    only_active = compute_company_activity(DashboardFilters(selected_statuses=["active"]), ctx)
    assert [c["id"] for c in only_active["companies"]] == ["c1", "c3"]


def test_company_activity_empty_state(now):
    ctx = _ctx([], [], now)
    payload = compute_company_activity(ctx["filters"], ctx)
    assert payload["empty"] is True
    assert payload["companies"] == []


def test_recent_activity_uses_placeholder_for_unmatched_company(companies, jobs, now):
    ctx = _ctx(companies, jobs, now)
    items = compute_recent_activity(ctx["filters"], ctx)["items"]
    assert [i["id"] for i in items] == ["JOB-001", "JOB-002", "JOB-003", "JOB-004"]
    assert items[0]["company"] == "Acme Pumps"
    assert items[3]["company"] == UNKNOWN_COMPANY
    assert items[0]["date"] == "3/10/2024"


def test_recent_activity_job_without_company_ignores_company_without_id(now):
    ctx = _ctx([{"name": "No Id Motors"}], [{"id": "j", "job_number": "J-1"}], now)
    (item,) = compute_recent_activity(ctx["filters"], ctx)["items"]
    assert item["company"] == UNKNOWN_COMPANY


def test_recent_activity_truncates_descriptions(companies, jobs, now):
    ctx = _ctx(companies, jobs, now)
    items = compute_recent_activity(ctx["filters"], ctx)["items"]
    assert items[0]["description"] == jobs[0].description[:50] + "..."
    assert items[1]["description"] == "Balance rotor..."


def test_recent_activity_limit(companies, jobs, now):
    ctx = _ctx(companies, jobs, now)
    items = compute_recent_activity(DashboardFilters(recent_limit=2), ctx)["items"]
    assert len(items) == 2
