"""Shared fixtures: a small workshop snapshot taken on 2024-03-15."""

import textwrap

import pandas as pd
import pytest

from core.models import Company, Invoice, Job, Warranty


@pytest.fixture
def now():
    return pd.Timestamp("2024-03-15")


@pytest.fixture
def companies():
    return [
        Company.from_record({"id": "c1", "name": "Acme Pumps", "status": "active", "motor_count": 12,
                             "contact_name": "Dana Reyes", "updated_at": "2024-01-05T09:00:00"}),
        Company.from_record({"id": "c2", "name": "Harbor Mills", "status": "inactive", "motor_count": 3,
                             "contact_name": "Sam Ortiz", "updated_at": "2024-02-20T10:30:00"}),
        Company.from_record({"id": "c3", "name": "Delta Fans", "status": "active", "motor_count": 0,
                             "contact_name": "Lee Park", "updated_at": "2024-03-02T08:00:00"}),
    ]


@pytest.fixture
def jobs():
    return [
        Job.from_record({"id": "j1", "job_number": "JOB-001", "company_id": "c1", "status": "pending",
                         "description": "Rewind 40HP stator and replace bearings on the drive end of the motor",
                         "estimated_cost": 100, "due_date": "2024-03-18",
                         "created_at": "2024-03-01", "updated_at": "2024-03-10T14:00:00"}),
        Job.from_record({"id": "j2", "job_number": "JOB-002", "company_id": "c1", "status": "completed",
                         "description": "Balance rotor", "estimated_cost": 200, "due_date": "2024-03-12",
                         "created_at": "2024-02-28", "updated_at": "2024-03-12T16:00:00"}),
        Job.from_record({"id": "j3", "job_number": "JOB-003", "company_id": "c2", "status": "in_progress",
                         "description": "Replace seals", "estimated_cost": None, "due_date": "2024-03-25",
                         "created_at": "2024-03-14", "updated_at": "2024-03-14T11:00:00"}),
        Job.from_record({"id": "j4", "job_number": "JOB-004", "company_id": "zz", "status": "pending",
                         "description": "Inspect windings", "estimated_cost": 50, "due_date": "",
                         "created_at": "2024-01-10", "updated_at": "2024-01-10T09:00:00"}),
    ]


@pytest.fixture
def invoices():
    return [
        Invoice.from_record({"id": "i1", "status": "paid", "total_amount": 500,
                             "paid_date": "2024-03-10", "due_date": "2024-03-05"}),
        Invoice.from_record({"id": "i2", "status": "paid", "total_amount": 250,
                             "paid_date": "2024-02-27", "due_date": "2024-02-20"}),
        Invoice.from_record({"id": "i3", "status": "sent", "total_amount": 900,
                             "paid_date": None, "due_date": "2024-03-01"}),
        Invoice.from_record({"id": "i4", "status": "sent", "total_amount": 75,
                             "paid_date": None, "due_date": "2024-04-01"}),
    ]


@pytest.fixture
def warranties():
    return [
        Warranty.from_record({"id": "w1", "status": "active", "warranty_end": "2024-04-10"}),
        Warranty.from_record({"id": "w2", "status": "expired", "warranty_end": "2024-03-20"}),
        Warranty.from_record({"id": "w3", "status": "active", "warranty_end": "2024-06-01"}),
    ]


def _write(path, text):
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    _write(tmp_path / "companies.csv", """
        id,name,status,motor_count,contact_name,updated_at
        1,Acme Pumps,active,12,Dana Reyes,2024-01-05T09:00:00
        2,Harbor Mills,Inactive,3,Sam Ortiz,2024-02-20T10:30:00
        3,Delta Fans,archived,,Lee Park,not-a-date
    """)
    _write(tmp_path / "jobs.csv", """
        id,job_number,company_id,status,description,estimated_cost,due_date,created_at,updated_at
        10,JOB-010,1,pending,Rewind stator,150,2024-03-18,2024-03-01,2024-03-10T14:00:00
        11,JOB-011,1,delivered,Balance rotor,,2024-03-01,2024-02-10,2024-03-02T08:00:00
        12,JOB-012,9,in_progress,Replace seals,80,,2024-03-05,2024-03-06T12:00:00
    """)
    _write(tmp_path / "invoices.json", """
        [
          {"id": 100, "status": "paid", "total_amount": 1250.5, "paid_date": "2024-03-04", "due_date": "2024-03-01"},
          {"id": 101, "status": "overdue", "total_amount": 300, "paid_date": null, "due_date": "2024-02-15"}
        ]
    """)
    _write(tmp_path / "warranties.csv", """
        id,status,warranty_end
        200,active,2024-03-30
    """)
    return tmp_path
