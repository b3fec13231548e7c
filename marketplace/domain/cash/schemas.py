"""Cash domain schemas - Pydantic models for responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommissionDebtResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    payment_id: Optional[int] = None
    commission_amount: float
    settled_amount: float = 0
    currency: str = "CLP"
    status: str
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CashSummaryResponse(BaseModel):
    total_due: float
    overdue_due: float
    pending_count: int
    overdue_count: int
    paid_count: int
    last_debt: Optional[CommissionDebtResponse] = None


class CommissionDebtListResponse(BaseModel):
    debts: list[CommissionDebtResponse]
    total: int


class CashEligibilityResponse(BaseModel):
    cash_enabled: bool
    blocked_reason: Optional[str] = None  # cash_commission_debt | cash_block_due_to_overdue_closure
    cash_cap: float
    cash_cap_message: str
