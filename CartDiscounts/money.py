"""Exact-decimal helpers for money values.

All amounts are ``decimal.Decimal``. Arithmetic is performed inside a
context built by :func:`money_context` so every calculation uses the same
precision and ``ROUND_HALF_UP`` rounding.
"""
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Union

MONEY_ROUNDING = ROUND_HALF_UP
DEFAULT_PRECISION = 28
MIN_PRECISION = 10

ZERO = Decimal(0)
HUNDRED = Decimal(100)

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """Convert ``value`` to a Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def money_context(precision: int = DEFAULT_PRECISION) -> Context:
    if precision < MIN_PRECISION:
        raise ValueError(f"Decimal precision must be at least {MIN_PRECISION}, got {precision}")
    return Context(prec=precision, rounding=MONEY_ROUNDING)


def format_percentage(value: Decimal) -> str:
    # 40 -> "40", 12.50 -> "12.5", 100 -> "100" (normalize alone gives 1E+2)
    return f"{value.normalize():f}"
