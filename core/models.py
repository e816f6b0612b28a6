from __future__ import annotations

import numbers
import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

import pandas as pd
from dateutil import tz

# IANA zone used to bring every timestamp onto one local clock; unset means the host zone.
DASHBOARD_TZ = os.environ.get("DASHBOARD_TZ") or None

NA_TOKENS = {"", "nan", "none", "null", "<na>", "nat", "n/a"}
UNKNOWN_COMPANY = "Unknown Company"


# ---------------- Scalar coercion ----------------
def normalize_text(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    s = str(value).strip()
    if s.lower() in NA_TOKENS:
        return None
    return s


def normalize_id(value: object) -> Optional[str]:
    """Ids compare as text; ``12.0`` coming out of a NaN-padded numeric column reads as ``12``."""
    if isinstance(value, float) and not pd.isna(value) and value.is_integer():
        value = int(value)
    return normalize_text(value)


def to_float(value: object) -> Optional[float]:
    s = normalize_text(value)
    if s is None:
        return None
    try:
        out = float(s.replace(",", "").lstrip("$"))
    except ValueError:
        return None
    if pd.isna(out) or out in (float("inf"), float("-inf")):
        return None
    return out


def to_int(value: object) -> Optional[int]:
    out = to_float(value)
    if out is None:
        return None
    return int(out)


def local_zone():
    zone = tz.gettz(DASHBOARD_TZ) if DASHBOARD_TZ else None
    return zone or tz.tzlocal()


def to_local(ts: pd.Timestamp) -> pd.Timestamp:
    """Aware timestamps are converted to the dashboard zone; naive ones are already local."""
    if ts.tzinfo is not None:
        ts = ts.tz_convert(local_zone()).tz_localize(None)
    return ts


def parse_timestamp(value: object) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        # bare numbers in exports are epoch milliseconds (UTC)
        if pd.isna(value):
            return None
        try:
            return to_local(pd.Timestamp(value, unit="ms", tz="UTC"))
        except (TypeError, ValueError, OverflowError):
            return None
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in NA_TOKENS:
            return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return to_local(ts)


# ---------------- Status enumerations ----------------
class _Status(str, Enum):
    @classmethod
    def parse(cls, value: object):
        if isinstance(value, cls):
            return value
        if isinstance(value, Enum):
            value = value.value
        s = normalize_text(value)
        if s is not None:
            key = s.lower().replace(" ", "_").replace("-", "_")
            for member in cls:
                if member.value == key:
                    return member
        return cls.UNKNOWN  # type: ignore[attr-defined]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class CompanyStatus(_Status):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"


class JobStatus(_Status):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    UNKNOWN = "unknown"


class InvoiceStatus(_Status):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class WarrantyStatus(_Status):
    ACTIVE = "active"
    EXPIRED = "expired"
    VOID = "void"
    UNKNOWN = "unknown"


ACTIVE_JOB_STATUSES: FrozenSet[str] = frozenset({JobStatus.PENDING.value, JobStatus.IN_PROGRESS.value})
DONE_JOB_STATUSES: FrozenSet[str] = frozenset({JobStatus.COMPLETED.value, JobStatus.DELIVERED.value})


# ---------------- Entities ----------------
class _Entity:
    DATE_FIELDS: tuple = ()
    NUMBER_FIELDS: tuple = ()

    @classmethod
    def columns(cls) -> List[str]:
        return [f.name for f in fields(cls)]  # type: ignore[arg-type]

    def to_record(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name in self.columns():
            value = getattr(self, name)
            out[name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class Company(_Entity):
    id: str
    name: str = ""
    status: CompanyStatus = CompanyStatus.UNKNOWN
    motor_count: int = 0
    contact_name: str = ""
    updated_at: Optional[pd.Timestamp] = None

    DATE_FIELDS = ("updated_at",)
    NUMBER_FIELDS = ("motor_count",)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Company":
        return cls(
            id=normalize_id(record.get("id")) or "",
            name=normalize_text(record.get("name")) or "",
            status=CompanyStatus.parse(record.get("status")),
            motor_count=max(0, to_int(record.get("motor_count")) or 0),
            contact_name=normalize_text(record.get("contact_name")) or "",
            updated_at=parse_timestamp(record.get("updated_at")),
        )


@dataclass(frozen=True)
class Job(_Entity):
    id: str
    job_number: str = ""
    company_id: Optional[str] = None
    status: JobStatus = JobStatus.UNKNOWN
    description: str = ""
    estimated_cost: Optional[float] = None
    due_date: Optional[pd.Timestamp] = None
    created_at: Optional[pd.Timestamp] = None
    updated_at: Optional[pd.Timestamp] = None

    DATE_FIELDS = ("due_date", "created_at", "updated_at")
    NUMBER_FIELDS = ("estimated_cost",)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Job":
        cost = to_float(record.get("estimated_cost"))
        return cls(
            id=normalize_id(record.get("id")) or "",
            job_number=normalize_text(record.get("job_number")) or "",
            company_id=normalize_id(record.get("company_id")),
            status=JobStatus.parse(record.get("status")),
            description=normalize_text(record.get("description")) or "",
            estimated_cost=cost if cost is None or cost >= 0 else None,
            due_date=parse_timestamp(record.get("due_date")),
            created_at=parse_timestamp(record.get("created_at")),
            updated_at=parse_timestamp(record.get("updated_at")),
        )


@dataclass(frozen=True)
class Invoice(_Entity):
    id: str
    status: InvoiceStatus = InvoiceStatus.UNKNOWN
    total_amount: float = 0.0
    paid_date: Optional[pd.Timestamp] = None
    due_date: Optional[pd.Timestamp] = None

    DATE_FIELDS = ("paid_date", "due_date")
    NUMBER_FIELDS = ("total_amount",)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Invoice":
        return cls(
            id=normalize_id(record.get("id")) or "",
            status=InvoiceStatus.parse(record.get("status")),
            total_amount=to_float(record.get("total_amount")) or 0.0,
            paid_date=parse_timestamp(record.get("paid_date")),
            due_date=parse_timestamp(record.get("due_date")),
        )


@dataclass(frozen=True)
class Warranty(_Entity):
    id: str
    status: WarrantyStatus = WarrantyStatus.UNKNOWN
    warranty_end: Optional[pd.Timestamp] = None

    DATE_FIELDS = ("warranty_end",)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Warranty":
        return cls(
            id=normalize_id(record.get("id")) or "",
            status=WarrantyStatus.parse(record.get("status")),
            warranty_end=parse_timestamp(record.get("warranty_end")),
        )
