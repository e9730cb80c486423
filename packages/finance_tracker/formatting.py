"""Number formatting shared by the aggregation engine and the intent answers."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

CURRENCY_SYMBOL = "₹"

_ONE_DECIMAL = Decimal("0.1")
_WHOLE = Decimal("1")


def _quantize(value: Decimal, exp: Decimal) -> Decimal:
    """Half-up ``quantize`` with enough precision for any finite magnitude."""

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exp.adjusted() + 2)
        return value.quantize(exp, rounding=ROUND_HALF_UP)


def round_one_decimal(value: Decimal) -> Decimal:
    """Round half-up to one decimal place (percentages)."""

    return _quantize(value, _ONE_DECIMAL)


def format_currency(value: Decimal | int | float) -> str:
    """Render an amount in whole currency units with grouping separators.

    >>> format_currency(Decimal("1234567.5"))
    '₹1,234,568'
    """

    raw = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    whole = _quantize(raw, _WHOLE)
    if whole == 0:
        # Avoid rendering "-0" for tiny negative remainders.
        whole = Decimal(0)
    return f"{CURRENCY_SYMBOL}{whole:,}"


__all__ = ["CURRENCY_SYMBOL", "format_currency", "round_one_decimal"]
