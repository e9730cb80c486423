"""Transaction aggregation engine.

Public API:
    - :func:`aggregate`: dashboard statistics (totals, monthly cards,
      month-over-month change, category breakdown, recent records).
    - :func:`summarize`: bounded summary handed to the AI collaborator.
    - :func:`percent_change`, :func:`previous_month`, :func:`period_totals`.

All functions are pure: the input collection is materialized once per call and
never mutated, and no state is kept between calls. Malformed records are
excluded from sums by the predicates in :mod:`finance_tracker.filters`.

Ordering precondition: ``recent`` is the first records *in the caller's
order*. Callers that want "most recent first" must sort before calling.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from .filters import filter_month, has_category, is_expense, parse_amount, sum_amounts
from .formatting import round_one_decimal
from .logging_setup import get_logger
from .models import (
    EXPENSE,
    INCOME,
    NO_BASELINE,
    DerivedStatistics,
    PercentChange,
    PeriodTotals,
    Transaction,
    Transactions,
    TransactionSummary,
)

RECENT_LIMIT_DEFAULT: int = 3

_logger = get_logger("finance_tracker.aggregation")


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return ``(year, month)`` of the calendar month before the given one.

    Equivalent to stepping back one month from the first day of the month, so
    January rolls over to December of the prior year.
    """

    if month == 1:
        return year - 1, 12
    return year, month - 1


def percent_change(current: Decimal, previous: Decimal) -> PercentChange:
    """Change from ``previous`` to ``current`` in percent (one decimal).

    A zero ``previous`` has no baseline and yields :data:`NO_BASELINE`, never a
    division by zero, infinity or ``0%``.
    """

    if previous == 0:
        return NO_BASELINE
    return PercentChange(value=round_one_decimal((current - previous) / previous * 100))


def period_totals(transactions: Sequence[Transaction], year: int, month: int) -> PeriodTotals:
    month_txs = filter_month(transactions, year, month)
    return PeriodTotals(
        year=year,
        month=month,
        income=sum_amounts(month_txs, INCOME),
        expense=sum_amounts(month_txs, EXPENSE),
    )


def category_totals(transactions: Sequence[Transaction]) -> tuple[dict[str, Decimal], Decimal]:
    """Group validated expense amounts by category.

    Returns ``(totals, uncategorized)``: ``totals`` keeps first-seen category
    order; expenses without a category are summed into ``uncategorized``
    rather than into a synthetic key.
    """

    totals: dict[str, Decimal] = {}
    uncategorized = Decimal(0)
    for tx in transactions:
        if not is_expense(tx):
            continue
        amount = parse_amount(tx.amount)
        if amount is None:
            continue
        label = tx.category if has_category(tx) else None
        if label is None:
            uncategorized += amount
        else:
            totals[label] = totals.get(label, Decimal(0)) + amount
    return totals, uncategorized


def aggregate(
    transactions: Transactions,
    reference_date: datetime | None = None,
    *,
    recent_limit: int = RECENT_LIMIT_DEFAULT,
) -> DerivedStatistics:
    """Derive dashboard statistics from a transaction snapshot.

    Parameters
    ----------
    transactions:
        The snapshot to aggregate. Order matters only for ``recent`` and for
        the order of ``category_totals`` keys.
    reference_date:
        Defines the "current month". Defaults to ``datetime.now()``.
    recent_limit:
        Number of leading records exposed as ``recent``.
    """

    items = list(transactions)
    ref = reference_date or datetime.now()

    total_income = sum_amounts(items, INCOME)
    total_expense = sum_amounts(items, EXPENSE)

    current = period_totals(items, ref.year, ref.month)
    prev_year, prev_month = previous_month(ref.year, ref.month)
    previous = period_totals(items, prev_year, prev_month)

    by_category, uncategorized = category_totals(items)

    stats = DerivedStatistics(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        current_month=current,
        previous_month=previous,
        income_change=percent_change(current.income, previous.income),
        expense_change=percent_change(current.expense, previous.expense),
        category_totals=by_category,
        uncategorized_expense=uncategorized,
        recent=tuple(items[: max(0, recent_limit)]),
    )
    _logger.debug(
        "aggregate: %d record(s), month=%04d-%02d, categories=%d",
        len(items),
        ref.year,
        ref.month,
        len(by_category),
    )
    return stats


def summarize(transactions: Transactions) -> TransactionSummary:
    """Build the bounded context (totals, categories, count) for the AI call."""

    items = list(transactions)
    total_income = sum_amounts(items, INCOME)
    total_expense = sum_amounts(items, EXPENSE)

    seen: dict[str, None] = {}
    for tx in items:
        if has_category(tx) and tx.category is not None:
            seen.setdefault(tx.category, None)

    return TransactionSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        categories=tuple(seen),
        count=len(items),
    )


__all__ = [
    "RECENT_LIMIT_DEFAULT",
    "aggregate",
    "category_totals",
    "percent_change",
    "period_totals",
    "previous_month",
    "summarize",
]
