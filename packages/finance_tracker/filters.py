"""Record predicates shared by every engine in ``finance_tracker``.

A malformed record (missing/non-numeric amount, unknown type, missing date) is
never an error here: it simply fails the relevant predicate and is excluded
from whatever sum or bucket is being computed. One bad record must not abort
aggregation of the rest.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from .logging_setup import get_logger
from .models import EXPENSE, INCOME, Transaction

_logger = get_logger("finance_tracker.filters")

AMOUNT_EXPONENT_LIMIT: int = 15
"""Largest accepted |adjusted exponent| of a non-zero amount (1e-15 to 1e15 scale)."""


def parse_amount(raw: Any) -> Decimal | None:
    """Return the amount as a finite ``Decimal``, or ``None`` when invalid.

    Accepted: ``int``, ``float``, ``Decimal`` and numeric strings (trimmed,
    non-empty). Rejected: ``None``, booleans, blank strings, NaN/Infinity and
    anything else. Floats go through ``str`` so ``0.1`` stays ``0.1``.

    Non-zero magnitudes outside ``10**-AMOUNT_EXPONENT_LIMIT`` to
    ``10**AMOUNT_EXPONENT_LIMIT`` are rejected too, so sums and ratios of
    accepted amounts stay inside the default decimal context.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            value = Decimal(s)
        except InvalidOperation:
            return None
    else:
        return None
    if not value.is_finite():
        return None
    if value and abs(value.adjusted()) > AMOUNT_EXPONENT_LIMIT:
        return None
    return value


def has_valid_amount(tx: Transaction) -> bool:
    return parse_amount(tx.amount) is not None


def is_type(tx: Transaction, type_: str) -> bool:
    return tx.type == type_


def is_income(tx: Transaction) -> bool:
    return tx.type == INCOME


def is_expense(tx: Transaction) -> bool:
    return tx.type == EXPENSE


def has_category(tx: Transaction) -> bool:
    """True when the record carries a non-blank category label."""

    return tx.category is not None and tx.category.strip() != ""


def is_geo_tagged(tx: Transaction) -> bool:
    return tx.location is not None


def in_month(tx: Transaction, year: int, month: int) -> bool:
    """Calendar membership by the record's own year/month (no tz shifting)."""

    if tx.date is None:
        return False
    return tx.date.year == year and tx.date.month == month


def filter_month(transactions: Iterable[Transaction], year: int, month: int) -> list[Transaction]:
    return [tx for tx in transactions if in_month(tx, year, month)]


def sum_amounts(transactions: Iterable[Transaction], type_: str) -> Decimal:
    """Sum validated amounts of records whose ``type`` equals ``type_``."""

    total = Decimal(0)
    skipped = 0
    for tx in transactions:
        if not is_type(tx, type_):
            continue
        amount = parse_amount(tx.amount)
        if amount is None:
            skipped += 1
            continue
        total += amount
    if skipped:
        _logger.debug("sum_amounts(%s): skipped %d record(s) with invalid amount", type_, skipped)
    return total


__all__ = [
    "AMOUNT_EXPONENT_LIMIT",
    "filter_month",
    "has_category",
    "has_valid_amount",
    "in_month",
    "is_expense",
    "is_geo_tagged",
    "is_income",
    "is_type",
    "parse_amount",
    "sum_amounts",
]
