"""File-backed sources, cached loading and context preparation."""

import logging

import pandas as pd
import pytest

from core import data
from core.data import as_frame, capture_now, format_currency, load_dashboard_data, prepare_context
from core.models import Company, CompanyStatus, Job
from core.sources import DataSourceError, FileSource, StaticSource, file_sources, read_records


def test_file_sources_read_csv_and_json(data_dir):
    sources = file_sources(data_dir)
    companies = sources.companies.list()
    assert [c.name for c in companies] == ["Acme Pumps", "Harbor Mills", "Delta Fans"]
    assert companies[1].status is CompanyStatus.INACTIVE
    assert companies[2].status is CompanyStatus.UNKNOWN
    assert companies[2].motor_count == 0
    assert companies[2].updated_at is None

    invoices = sources.invoices.list()
    assert [i.id for i in invoices] == ["100", "101"]
    assert invoices[0].total_amount == 1250.5
    assert invoices[1].paid_date is None


def test_missing_file_is_an_empty_collection(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="core.sources"):
        assert FileSource(Company, None).list() == []
    assert "No Company file found" in caplog.text
    assert file_sources(tmp_path).jobs.list() == []


def test_unreadable_file_raises_data_source_error(tmp_path):
    bad = tmp_path / "companies.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataSourceError) as info:
        read_records(bad)
    assert info.value.path == bad


def test_empty_csv_has_no_records(tmp_path):
    empty = tmp_path / "jobs.csv"
    empty.write_text("", encoding="utf-8")
    assert read_records(empty) == []


def test_static_source_coerces_mappings():
    source = StaticSource(Job, [{"id": 1, "status": "Pending"}])
    (job,) = source.list()
    assert job.id == "1"
    assert job.status.value == "pending"


def test_load_dashboard_data_is_cached(data_dir):
    first = load_dashboard_data(data_dir)
    second = load_dashboard_data(data_dir)
    assert first is second
    assert sorted(first["files"]) == ["companies.csv", "invoices.json", "jobs.csv", "warranties.csv"]
    assert len(first["jobs"]) == 3


def test_load_dashboard_data_uses_configured_dir(data_dir, monkeypatch):
    monkeypatch.setattr(data, "DATA_DIR", data_dir)
    assert len(load_dashboard_data()["companies"]) == 3


def test_load_dashboard_data_without_files(tmp_path):
    ctx = load_dashboard_data(tmp_path)
    assert ctx["files"] == []
    assert ctx["companies"].empty
    assert list(ctx["jobs"].columns) == Job.columns()


def test_prepare_context_captures_now_once(data_dir):
    ctx = prepare_context({}, load_dashboard_data(data_dir), now="2024-03-15T08:00:00")
    assert ctx["now"] == pd.Timestamp("2024-03-15T08:00:00")
    assert ctx["filters"].top_n == 5
    assert set(ctx) >= {"companies", "jobs", "invoices", "warranties"}


def test_prepare_context_does_not_share_frames(data_dir):
    data_ctx = load_dashboard_data(data_dir)
    ctx = prepare_context(None, data_ctx, now="2024-03-15")
    ctx["jobs"]["status"] = "delivered"
    assert data_ctx["jobs"]["status"].tolist() == ["pending", "delivered", "in_progress"]


def test_capture_now_rejects_garbage():
    with pytest.raises(ValueError):
        capture_now("yesterday-ish")


def test_capture_now_defaults_to_clock():
    ts = capture_now()
    assert ts.tzinfo is None
    assert abs(ts - pd.Timestamp.now()) < pd.Timedelta(days=1)


def test_as_frame_typing():
    df = as_frame([{"id": "a", "due_date": "2024-03-01", "estimated_cost": "12.5"}], Job)
    assert pd.api.types.is_datetime64_any_dtype(df["due_date"])
    assert df["estimated_cost"].iloc[0] == 12.5
    empty = as_frame(None, Job)
    assert empty.empty
    assert pd.api.types.is_datetime64_any_dtype(empty["created_at"])


def test_format_currency():
    assert format_currency(1234) == "$1,234"
    assert format_currency(1234.5) == "$1,234.5"
    assert format_currency(0) == "$0"
    assert format_currency(None) == "N/A"


def test_empty_json_has_no_records(tmp_path):
    empty = tmp_path / "jobs.json"
    empty.write_text("", encoding="utf-8")
    assert read_records(empty) == []
    blank = tmp_path / "invoices.json"
    blank.write_text("  \n", encoding="utf-8")
    assert read_records(blank) == []
