# Overview: Exact decimal helpers for prices, subtotals and totals.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")

# Numeric(12, 2): ten integer digits
MAX_PRICE = Decimal("9999999999.99")


def to_money(value: Decimal | int) -> Decimal:
    """Quantize to cents, half-up. Floats are rejected upstream and never reach here."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal | int | None) -> str | None:
    if value is None:
        return None
    return str(to_money(value))
