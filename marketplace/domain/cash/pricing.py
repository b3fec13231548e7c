"""Cash pricing - tax and commission breakdown of a gross cash amount"""

from pydantic import BaseModel

from .settings import CashSettings


class CashBreakdown(BaseModel):
    amount: float
    price_base: float
    tax_amount: float
    commission_amount: float
    provider_amount: float


def compute_cash_breakdown(amount: float, tax_rate: float, commission_rate: float) -> CashBreakdown:
    """
    Split a tax-inclusive amount into base, tax, commission and provider net.
    Every step is rounded to 2 decimals before feeding the next one.
    """
    price_base = round(amount / (1 + tax_rate / 100), 2)
    tax_amount = round(amount - price_base, 2)
    commission_amount = round(price_base * (commission_rate / 100), 2)
    provider_amount = round(price_base - commission_amount, 2)

    return CashBreakdown(
        amount=amount,
        price_base=price_base,
        tax_amount=tax_amount,
        commission_amount=commission_amount,
        provider_amount=provider_amount,
    )


def exceeds_cash_cap(amount: float, settings: CashSettings) -> bool:
    # Compared against the gross price
    return amount > settings.cash_cap
