from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ThresholdsModel(BaseModel):
    job_due_days: int = 7
    warranty_expiry_days: int = 30


class DashboardFiltersModel(BaseModel):
    selected_statuses: List[str] = Field(default_factory=list)
    top_n: int = 5
    recent_limit: int = 5
    thresholds: ThresholdsModel = Field(default_factory=ThresholdsModel)


class MetaStatusesResponse(BaseModel):
    company: List[str]
    job: List[str]
    invoice: List[str]
    warranty: List[str]
