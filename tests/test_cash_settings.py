from unittest.mock import MagicMock

from marketplace.domain.cash.pricing import compute_cash_breakdown, exceeds_cash_cap
from marketplace.domain.cash.settings import (
    CashSettings,
    build_cash_cap_error_message,
    format_clp,
    load_cash_settings,
)


def test_defaults_when_no_rows(db):
    settings = load_cash_settings(db)

    assert settings == CashSettings(cash_cap=150000, tax_rate=19, commission_rate=15, due_days=3)


def test_rows_override_defaults(db, set_setting):
    set_setting("cash_max_amount", "200000")
    set_setting("default_tax_rate", "10")
    set_setting("default_commission_rate", "12.5")
    set_setting("cash_commission_due_days", "7")

    settings = load_cash_settings(db)

    assert settings.cash_cap == 200000
    assert settings.tax_rate == 10
    assert settings.commission_rate == 12.5
    assert settings.due_days == 7


def test_non_numeric_rows_keep_defaults(db, set_setting):
    set_setting("cash_max_amount", "lots")
    set_setting("default_tax_rate", None)
    set_setting("default_commission_rate", "inf")
    set_setting("cash_commission_due_days", "5")

    settings = load_cash_settings(db)

    assert settings.cash_cap == 150000
    assert settings.tax_rate == 19
    assert settings.commission_rate == 15
    assert settings.due_days == 5


def test_unrelated_keys_are_ignored(db, set_setting):
    set_setting("maintenance_mode", "1")

    assert load_cash_settings(db) == CashSettings()


def test_query_failure_returns_defaults():
    broken_db = MagicMock()
    broken_db.query.side_effect = RuntimeError("database unavailable")

    settings = load_cash_settings(broken_db)

    assert settings == CashSettings(cash_cap=150000, tax_rate=19, commission_rate=15, due_days=3)
    broken_db.rollback.assert_called_once()


def test_breakdown_rounds_each_step():
    breakdown = compute_cash_breakdown(119000, 19, 15)

    assert breakdown.price_base == 100000.00
    assert breakdown.tax_amount == 19000.00
    assert breakdown.commission_amount == 15000.00
    assert breakdown.provider_amount == 85000.00


def test_breakdown_uneven_amount():
    breakdown = compute_cash_breakdown(25000, 19, 15)

    assert breakdown.price_base == 21008.40
    assert breakdown.tax_amount == 3991.60
    assert breakdown.commission_amount == 3151.26
    assert breakdown.provider_amount == 17857.14


def test_cash_cap_is_strictly_greater():
    settings = CashSettings()

    assert not exceeds_cash_cap(150000, settings)
    assert exceeds_cash_cap(150000.01, settings)


def test_format_clp():
    assert format_clp(150000) == "150.000"
    assert format_clp(1234567.6) == "1.234.568"
    assert format_clp(999) == "999"


def test_cash_cap_error_message():
    message = build_cash_cap_error_message(150000)

    assert "$150.000" in message
    assert "tarjeta" in message
