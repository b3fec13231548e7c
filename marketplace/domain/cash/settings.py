"""
Cash settings - tunable financial parameters for cash appointments
Loaded from platform_settings on every call, falling back to defaults
"""

import logging
import math

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...models import PlatformSetting

logger = logging.getLogger(__name__)

# platform_settings key -> CashSettings field
SETTING_KEYS = {
    "cash_max_amount": "cash_cap",
    "default_tax_rate": "tax_rate",
    "default_commission_rate": "commission_rate",
    "cash_commission_due_days": "due_days",
}


class CashSettings(BaseModel):
    cash_cap: float = 150000
    tax_rate: float = 19
    commission_rate: float = 15
    due_days: float = 3


def _parse_number(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def load_cash_settings(db: Session) -> CashSettings:
    """
    Load cash settings from platform_settings.

    Rows that are missing or not numeric keep their default. A failed query
    degrades to the defaults instead of raising, so a settings outage never
    halts closure processing.
    """
    settings = CashSettings()

    try:
        rows = (
            db.query(PlatformSetting.setting_key, PlatformSetting.setting_value)
            .filter(PlatformSetting.setting_key.in_(list(SETTING_KEYS)))
            .all()
        )
    except Exception as e:
        logger.warning(f"⚠️ Could not load cash settings, using defaults: {e}")
        db.rollback()
        return CashSettings()

    for key, raw_value in rows:
        value = _parse_number(raw_value)
        if value is None:
            logger.debug(f"Ignoring non-numeric cash setting {key}={raw_value!r}")
            continue
        setattr(settings, SETTING_KEYS[key], value)

    return settings


def format_clp(amount: float) -> str:
    """Format an amount as Chilean pesos, e.g. 150000 -> '150.000'"""
    rounded = int(math.floor(amount + 0.5))
    return f"{rounded:,}".replace(",", ".")


def build_cash_cap_error_message(cash_cap: float) -> str:
    return (
        f"Por el momento no podemos procesar pagos en efectivo de ${format_clp(cash_cap)} o más. "
        "Por favor, selecciona pago con tarjeta."
    )
