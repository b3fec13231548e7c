"""Closure repository - Database operations for cash appointment closure"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...config import CASH_CURRENCY
from ...models import Appointment, Payment, ProviderCommissionDebt
from ..cash.pricing import CashBreakdown

ACTIVATION_STATUSES = ("confirmed", "in_progress", "completed")


class ClosureRepository:
    """Repository for closure database operations"""

    @staticmethod
    def get_activation_candidates(db: Session) -> list:
        """Cash appointments not yet in closure, regardless of their end time"""
        return (
            db.query(
                Appointment.id,
                Appointment.client_id,
                Appointment.provider_id,
                Appointment.date,
                Appointment.end_time,
            )
            .filter(
                Appointment.payment_method == "cash",
                Appointment.closure_state == "none",
                Appointment.status.in_(ACTIVATION_STATUSES),
            )
            .all()
        )

    @staticmethod
    def mark_pending_close(
        db: Session, appointment_id: int, due_at: datetime, now: datetime
    ) -> bool:
        """none -> pending_close. Returns False when another writer got there first."""
        updated = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.closure_state == "none")
            .update(
                {
                    Appointment.closure_state: "pending_close",
                    Appointment.closure_due_at: due_at,
                    Appointment.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated > 0

    @staticmethod
    def get_due_for_resolution(db: Session, now: datetime) -> list:
        return (
            db.query(
                Appointment.id,
                Appointment.client_id,
                Appointment.provider_id,
                Appointment.price,
                Appointment.closure_provider_action,
                Appointment.closure_client_action,
            )
            .filter(
                Appointment.closure_state == "pending_close",
                Appointment.closure_due_at.isnot(None),
                Appointment.closure_due_at < now,
            )
            .all()
        )

    @staticmethod
    def has_completed_payment(db: Session, appointment_id: int) -> bool:
        payment = (
            db.query(Payment.id)
            .filter(Payment.appointment_id == appointment_id, Payment.status == "completed")
            .first()
        )
        return payment is not None

    @staticmethod
    def create_cash_payment(
        db: Session,
        appointment_id: int,
        client_id: int,
        provider_id: int,
        breakdown: CashBreakdown,
        now: datetime,
    ) -> Payment:
        payment = Payment(
            appointment_id=appointment_id,
            client_id=client_id,
            provider_id=provider_id,
            amount=breakdown.amount,
            tax_amount=breakdown.tax_amount,
            commission_amount=breakdown.commission_amount,
            provider_amount=breakdown.provider_amount,
            currency=CASH_CURRENCY,
            payment_method="cash",
            status="completed",
            paid_at=now,
            can_release=True,
            release_status="pending",
        )
        db.add(payment)
        db.flush()  # Assigns payment.id for the debt row
        return payment

    @staticmethod
    def create_commission_debt(
        db: Session,
        provider_id: int,
        appointment_id: int,
        payment_id: int,
        commission_amount: float,
        due_date: datetime,
        now: datetime,
    ) -> ProviderCommissionDebt:
        debt = ProviderCommissionDebt(
            provider_id=provider_id,
            appointment_id=appointment_id,
            payment_id=payment_id,
            commission_amount=commission_amount,
            currency=CASH_CURRENCY,
            status="pending",
            due_date=due_date,
            created_at=now,
        )
        db.add(debt)
        db.flush()
        return debt

    @staticmethod
    def mark_resolved(db: Session, appointment_id: int, now: datetime) -> bool:
        """pending_close -> resolved. Returns False when the row was already resolved."""
        updated = (
            db.query(Appointment)
            .filter(
                Appointment.id == appointment_id, Appointment.closure_state == "pending_close"
            )
            .update(
                {Appointment.closure_state: "resolved", Appointment.updated_at: now},
                synchronize_session=False,
            )
        )
        return updated > 0

    @staticmethod
    def get_pending_closures_for_user(
        db: Session, user_id: int, limit: Optional[int] = 50
    ) -> list[Appointment]:
        query = (
            db.query(Appointment)
            .filter(
                Appointment.closure_state == "pending_close",
                or_(Appointment.provider_id == user_id, Appointment.client_id == user_id),
            )
            .order_by(Appointment.closure_due_at.asc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()
