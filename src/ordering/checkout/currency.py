"""Currency conversion for order totals.

Catalog prices are in USD. An order is priced in exactly one currency and
converted exactly once, when it is assembled, at the configured
``usd_to_bdt_rate``. Rounding happens after summation: BDT amounts are whole
taka, USD amounts have two decimals.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ordering.errors import UnsupportedCurrencyError


class Currency(Enum):
    USD = "USD"
    BDT = "BDT"


_QUANTUM = {
    Currency.USD: Decimal("0.01"),
    Currency.BDT: Decimal("1"),
}


def parse_currency(value) -> Currency:
    try:
        return Currency(value)
    except ValueError as exc:
        raise UnsupportedCurrencyError({"currency": [f"Unsupported currency: {value!r}"]}) from exc


def rate_for(currency: Currency, usd_to_bdt_rate) -> Decimal:
    """Multiplier from USD into ``currency``."""
    if currency is Currency.BDT:
        return Decimal(str(usd_to_bdt_rate))
    return Decimal("1")


def convert(amount_usd, currency: Currency, usd_to_bdt_rate) -> Decimal:
    """Convert a USD amount without rounding."""
    return Decimal(str(amount_usd)) * rate_for(currency, usd_to_bdt_rate)


def round_amount(amount, currency: Currency) -> Decimal:
    return Decimal(str(amount)).quantize(_QUANTUM[currency], rounding=ROUND_HALF_UP)


def format_amount(amount, currency) -> str:
    """Gateway wire format: ``"2200"`` for BDT, ``"20.00"`` for USD."""
    currency = Currency(currency)
    return str(round_amount(amount, currency))
