"""Closure domain schemas - Pydantic models for responses"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ActivationSummary(BaseModel):
    candidates: int
    activated: int
    skipped: int
    errors: int


class ResolutionSummary(BaseModel):
    mutual_no_show: int
    already_paid: int
    settle_cash: int
    cash_cap_exceeded: int
    resolve_only: int
    skipped: int
    errors: int


class ClosureCycleResult(BaseModel):
    activation: ActivationSummary
    resolution: ResolutionSummary


class PendingClosureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    provider_id: int
    date: Optional[dt.date] = None
    end_time: Optional[dt.time] = None
    price: Optional[float] = None
    closure_state: str
    closure_due_at: Optional[dt.datetime] = None
    closure_provider_action: Optional[str] = None
    closure_client_action: Optional[str] = None
