"""Cash router - FastAPI endpoints for provider cash debt and cash eligibility"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    CashEligibilityResponse,
    CashSummaryResponse,
    CommissionDebtListResponse,
    CommissionDebtResponse,
)
from .service import (
    DEBT_STATUSES,
    get_cash_summary,
    has_overdue_closure,
    has_pending_cash_debt,
    list_commission_debts,
)
from .settings import build_cash_cap_error_message, load_cash_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cash"])


@router.get("/provider/cash/summary", response_model=CashSummaryResponse)
async def get_provider_cash_summary(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Commission debt totals for the current provider"""
    summary = get_cash_summary(db, current_user.id)
    last = summary.pop("last_debt")
    return CashSummaryResponse(
        **summary,
        last_debt=CommissionDebtResponse.model_validate(last) if last else None,
    )


@router.get("/provider/cash/commissions", response_model=CommissionDebtListResponse)
async def get_provider_commissions(
    status: Optional[str] = Query(None, description=" | ".join(DEBT_STATUSES)),
    limit: int = Query(100, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if status and status not in DEBT_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown debt status: {status}")

    debts, total = list_commission_debts(db, current_user.id, status, limit, offset)
    return CommissionDebtListResponse(
        debts=[CommissionDebtResponse.model_validate(d) for d in debts], total=total
    )


@router.get("/cash/eligibility", response_model=CashEligibilityResponse)
async def get_cash_eligibility(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Whether the current user may start a new cash transaction.
    Blocked while commission debt is outstanding or a closure is overdue.
    """
    settings = load_cash_settings(db)
    blocked_reason = None

    if has_overdue_closure(db, current_user.id):
        logger.warning(f"⚠️ Blocking cash for user {current_user.id} due to overdue pending_close")
        blocked_reason = "cash_block_due_to_overdue_closure"
    elif has_pending_cash_debt(db, current_user.id):
        blocked_reason = "cash_commission_debt"

    return CashEligibilityResponse(
        cash_enabled=blocked_reason is None,
        blocked_reason=blocked_reason,
        cash_cap=settings.cash_cap,
        cash_cap_message=build_cash_cap_error_message(settings.cash_cap),
    )
