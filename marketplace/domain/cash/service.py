"""Provider cash service - Cash eligibility and commission debt views"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from ...models import Appointment, ProviderCommissionDebt

logger = logging.getLogger(__name__)

OUTSTANDING_DEBT_STATUSES = ("pending", "overdue", "under_review", "rejected")
DEBT_STATUSES = ("pending", "overdue", "under_review", "rejected", "paid", "cancelled")


def has_pending_cash_debt(db: Session, provider_id: Optional[int]) -> bool:
    """True when the provider still owes commission on a cash appointment"""
    if not provider_id or provider_id <= 0:
        return False

    try:
        pending = (
            db.query(func.count(ProviderCommissionDebt.id))
            .filter(
                ProviderCommissionDebt.provider_id == provider_id,
                ProviderCommissionDebt.status.in_(OUTSTANDING_DEBT_STATUSES),
                (
                    ProviderCommissionDebt.commission_amount
                    - func.coalesce(ProviderCommissionDebt.settled_amount, 0)
                )
                > 0,
            )
            .scalar()
        )
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error checking pending cash debt for provider {provider_id}: {e}")
        return False

    return (pending or 0) > 0


def resolve_cash_payment_enabled(db: Session, provider_id: Optional[int]) -> bool:
    return not has_pending_cash_debt(db, provider_id)


def has_overdue_closure(db: Session, user_id: int, now: Optional[datetime] = None) -> bool:
    """True when the user has a cash appointment whose closure window expired unresolved"""
    now = now or datetime.now()
    overdue = (
        db.query(Appointment.id)
        .filter(
            Appointment.payment_method == "cash",
            Appointment.closure_state == "pending_close",
            Appointment.closure_due_at.isnot(None),
            Appointment.closure_due_at < now,
            or_(Appointment.provider_id == user_id, Appointment.client_id == user_id),
        )
        .first()
    )
    return overdue is not None


def get_cash_summary(db: Session, provider_id: int) -> dict:
    """Commission debt totals for a provider"""
    totals = (
        db.query(
            func.coalesce(
                func.sum(
                    case(
                        (
                            ProviderCommissionDebt.status.in_(OUTSTANDING_DEBT_STATUSES),
                            ProviderCommissionDebt.commission_amount
                            - func.coalesce(ProviderCommissionDebt.settled_amount, 0),
                        ),
                        else_=0,
                    )
                ),
                0,
            ),
            func.coalesce(
                func.sum(
                    case(
                        (
                            ProviderCommissionDebt.status == "overdue",
                            ProviderCommissionDebt.commission_amount
                            - func.coalesce(ProviderCommissionDebt.settled_amount, 0),
                        ),
                        else_=0,
                    )
                ),
                0,
            ),
            func.coalesce(
                func.sum(case((ProviderCommissionDebt.status == "pending", 1), else_=0)), 0
            ),
            func.coalesce(
                func.sum(case((ProviderCommissionDebt.status == "overdue", 1), else_=0)), 0
            ),
            func.coalesce(func.sum(case((ProviderCommissionDebt.status == "paid", 1), else_=0)), 0),
        )
        .filter(ProviderCommissionDebt.provider_id == provider_id)
        .one()
    )

    last = (
        db.query(ProviderCommissionDebt)
        .filter(ProviderCommissionDebt.provider_id == provider_id)
        .order_by(ProviderCommissionDebt.created_at.desc(), ProviderCommissionDebt.id.desc())
        .first()
    )

    total_due, overdue_due, pending_count, overdue_count, paid_count = totals
    return {
        "total_due": float(total_due or 0),
        "overdue_due": float(overdue_due or 0),
        "pending_count": int(pending_count or 0),
        "overdue_count": int(overdue_count or 0),
        "paid_count": int(paid_count or 0),
        "last_debt": last,
    }


def list_commission_debts(
    db: Session,
    provider_id: int,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[ProviderCommissionDebt], int]:
    """Unknown statuses match nothing"""
    if status and status not in DEBT_STATUSES:
        return [], 0

    query = db.query(ProviderCommissionDebt).filter(
        ProviderCommissionDebt.provider_id == provider_id
    )
    if status:
        query = query.filter(ProviderCommissionDebt.status == status)

    total = query.count()
    debts = (
        query.order_by(ProviderCommissionDebt.created_at.desc(), ProviderCommissionDebt.id.desc())
        .offset(max(offset, 0))
        .limit(min(max(limit, 1), 200))
        .all()
    )
    return debts, total
