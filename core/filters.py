from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.models import CompanyStatus


@dataclass(frozen=True)
class Thresholds:
    job_due_days: int = 7
    warranty_expiry_days: int = 30


@dataclass(frozen=True)
class DashboardFilters:
    selected_statuses: List[str] = field(default_factory=list)
    top_n: int = 5
    recent_limit: int = 5
    thresholds: Thresholds = field(default_factory=Thresholds)


def _as_status_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    out: List[str] = []
    for v in values:
        if v is None or str(v).strip() in {"", "All", "All Statuses"}:
            continue
        status = CompanyStatus.parse(v).value
        if status not in out:
            out.append(status)
    return out


def _clamp_int(value: object, default: int, lo: int, hi: int) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    return max(lo, min(hi, out))


def normalize_filters(raw: Optional[dict]) -> DashboardFilters:
    raw = raw or {}
    selected_statuses = _as_status_list(raw.get("selected_statuses"))
    top_n = _clamp_int(raw.get("top_n", 5), 5, 1, 200)
    recent_limit = _clamp_int(raw.get("recent_limit", 5), 5, 1, 200)

    t = raw.get("thresholds") or {}
    thresholds = Thresholds(
        job_due_days=_clamp_int(t.get("job_due_days", 7), 7, 1, 365),
        warranty_expiry_days=_clamp_int(t.get("warranty_expiry_days", 30), 30, 1, 365),
    )
    return DashboardFilters(
        selected_statuses=selected_statuses,
        top_n=top_n,
        recent_limit=recent_limit,
        thresholds=thresholds,
    )
