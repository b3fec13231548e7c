"""
Cash appointment closure
Handles none → pending_close once the service has ended (plus an offset)
Handles pending_close → resolved once the closure window has expired,
posting the cash payment and the provider's commission debt when applicable
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...config import CLOSURE_DUE_WINDOW_HOURS
from ..cash.pricing import compute_cash_breakdown, exceeds_cash_cap
from ..cash.settings import CashSettings, load_cash_settings
from .decision import (
    ALL_OUTCOMES,
    OUTCOME_CASH_CAP_EXCEEDED,
    OUTCOME_SETTLE_CASH,
    decide_closure_outcome,
)
from .repository import ClosureRepository

logger = logging.getLogger(__name__)

CLOSURE_NOTIFICATION_TITLE = "Pendiente de Cierre"
PROVIDER_CLOSURE_MESSAGE = "Confirma el cierre de tu cita (efectivo)."
CLIENT_CLOSURE_MESSAGE = "Confirma si tu servicio se completó correctamente."

Notifier = Callable[[Session, int, str, str, dict], object]


class ClosureAlreadyResolved(Exception):
    """Another writer resolved the appointment first"""


def _default_notifier(db: Session, user_id: int, title: str, body: str, data: dict):
    from ...services.push_service import PushService

    return PushService.notify_user(db, user_id, title, body, data)


def to_datetime(date_value, time_value) -> Optional[datetime]:
    """
    Combine an appointment date and time into a naive local datetime.
    Accepts date/time objects or 'YYYY-MM-DD' and 'HH:MM[:SS]' strings.
    Returns None when either part is missing or unparseable.
    """
    if not date_value or time_value is None or time_value == "":
        return None

    try:
        if isinstance(date_value, datetime):
            day = date_value.date()
        elif isinstance(date_value, date):
            day = date_value
        else:
            year, month, day_of_month = (int(part) for part in str(date_value)[:10].split("-"))
            day = date(year, month, day_of_month)

        if isinstance(time_value, time):
            clock = time_value
        else:
            parts = str(time_value)[:5].split(":")
            hour = int(parts[0]) if parts[0] else 0
            minute = int(parts[1]) if len(parts) > 1 and parts[1] else 0
            clock = time(hour, minute)
    except (TypeError, ValueError):
        return None

    return datetime.combine(day, time(clock.hour, clock.minute))


def _empty_activation_summary() -> dict:
    return {"candidates": 0, "activated": 0, "skipped": 0, "errors": 0}


def _empty_resolution_summary() -> dict:
    summary = {outcome: 0 for outcome in ALL_OUTCOMES}
    summary.update({"skipped": 0, "errors": 0})
    return summary


def _notify_safely(notifier: Notifier, db: Session, user_id: int, body: str, appointment_id: int):
    try:
        notifier(
            db,
            int(user_id),
            CLOSURE_NOTIFICATION_TITLE,
            body,
            {"type": "closure", "appointment_id": str(appointment_id)},
        )
    except Exception as e:
        db.rollback()
        logger.debug(f"Closure notification to user {user_id} failed: {e}")


def activate_pending_close(
    db: Session,
    offset_minutes: int,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> dict:
    """
    Flag cash appointments whose end time plus offset has passed as pending_close.

    The due timestamp is always end time + 25 hours, independent of the
    offset. The guarded UPDATE makes overlapping runs activate a row once.

    Returns:
        dict: Summary of the activation pass
    """
    now = now or datetime.now()
    notifier = notifier or _default_notifier
    summary = _empty_activation_summary()

    candidates = ClosureRepository.get_activation_candidates(db)
    summary["candidates"] = len(candidates)

    for appointment in candidates:
        end_dt = to_datetime(appointment.date, appointment.end_time)
        if end_dt is None:
            summary["skipped"] += 1
            logger.debug(f"Appointment {appointment.id} has no usable date/end_time, skipping")
            continue

        if now < end_dt + timedelta(minutes=offset_minutes):
            continue

        due_at = end_dt + timedelta(hours=CLOSURE_DUE_WINDOW_HOURS)
        try:
            activated = ClosureRepository.mark_pending_close(db, appointment.id, due_at, now)
            db.commit()
        except Exception as e:
            db.rollback()
            summary["errors"] += 1
            logger.error(f"❌ Failed to activate closure for appointment {appointment.id}: {e}")
            continue

        if not activated:
            continue

        summary["activated"] += 1
        logger.info(
            f"✅ Appointment {appointment.id} transitioned: none → pending_close (due {due_at.isoformat()})"
        )

        _notify_safely(notifier, db, appointment.provider_id, PROVIDER_CLOSURE_MESSAGE, appointment.id)
        _notify_safely(notifier, db, appointment.client_id, CLIENT_CLOSURE_MESSAGE, appointment.id)

    return summary


def _resolve_appointment(db: Session, appointment, settings: CashSettings, now: datetime) -> str:
    has_payment = ClosureRepository.has_completed_payment(db, appointment.id)
    outcome = decide_closure_outcome(
        appointment.closure_provider_action, appointment.closure_client_action, has_payment
    )

    if outcome == OUTCOME_SETTLE_CASH:
        amount = float(appointment.price or 0)
        if exceeds_cash_cap(amount, settings):
            outcome = OUTCOME_CASH_CAP_EXCEEDED
            logger.warning(
                f"⚠️ Appointment {appointment.id} amount {amount} exceeds cash cap {settings.cash_cap}; resolving without payment"
            )
        else:
            breakdown = compute_cash_breakdown(amount, settings.tax_rate, settings.commission_rate)
            payment = ClosureRepository.create_cash_payment(
                db,
                appointment.id,
                appointment.client_id,
                appointment.provider_id,
                breakdown,
                now,
            )
            ClosureRepository.create_commission_debt(
                db,
                appointment.provider_id,
                appointment.id,
                payment.id,
                breakdown.commission_amount,
                now + timedelta(days=settings.due_days),
                now,
            )

    if not ClosureRepository.mark_resolved(db, appointment.id, now):
        raise ClosureAlreadyResolved(appointment.id)

    return outcome


def auto_resolve_close(
    db: Session, now: Optional[datetime] = None, settings: Optional[CashSettings] = None
) -> dict:
    """
    Resolve every pending_close appointment whose closure window has expired.

    Each appointment is handled in its own transaction: the cash payment, the
    commission debt and the resolving UPDATE commit together or not at all. A
    failed row stays pending_close and is retried on the next run.

    Returns:
        dict: Count per outcome plus skipped/errors
    """
    now = now or datetime.now()
    summary = _empty_resolution_summary()

    due = ClosureRepository.get_due_for_resolution(db, now)
    if not due:
        logger.debug("ℹ️ No expired closures to resolve")
        return summary

    settings = settings or load_cash_settings(db)

    for appointment in due:
        try:
            outcome = _resolve_appointment(db, appointment, settings, now)
            db.commit()
        except ClosureAlreadyResolved:
            db.rollback()
            summary["skipped"] += 1
            logger.info(f"ℹ️ Appointment {appointment.id} already resolved by another run")
            continue
        except Exception as e:
            db.rollback()
            summary["errors"] += 1
            logger.error(f"❌ Failed to resolve closure for appointment {appointment.id}: {e}")
            continue

        summary[outcome] += 1
        logger.info(f"✅ Appointment {appointment.id} transitioned: pending_close → resolved ({outcome})")

    return summary


def run_closure_cycle(
    db: Session,
    offset_minutes: int,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> dict:
    """Activation then auto-resolution, sequentially. A failing step never skips the other."""
    try:
        activation = activate_pending_close(db, offset_minutes, now=now, notifier=notifier)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Closure activation step failed: {e}")
        activation = _empty_activation_summary()
        activation["errors"] = 1

    try:
        resolution = auto_resolve_close(db, now=now)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Closure resolution step failed: {e}")
        resolution = _empty_resolution_summary()
        resolution["errors"] = 1

    if activation["activated"] or any(resolution.values()):
        logger.info(f"📊 Closure cycle summary: activation={activation} resolution={resolution}")

    return {"activation": activation, "resolution": resolution}
