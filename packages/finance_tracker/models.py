"""Data models and type aliases for ``finance_tracker``.

Transactions are owned by an external store (a JSON API or document database)
and arrive here as a fresh snapshot per call. Records are modelled as frozen
dataclasses: optional fields are explicit ``None`` values and the raw
``amount`` is kept as delivered so that validity is always decided by an
explicit predicate (see :mod:`finance_tracker.filters`) rather than by
truthiness.

Derived views (statistics, markers, summaries) are new values built by the
engines; nothing here is mutated after construction.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from .formatting import round_one_decimal

# ---------------------------------------------------------------------------
# Core record and collections
# ---------------------------------------------------------------------------

type TransactionType = Literal["income", "expense"]
"""The two record types the engines recognise. Any other value is inert."""

INCOME: TransactionType = "income"
EXPENSE: TransactionType = "expense"


def _coerce_coordinate(value: Any) -> float | None:
    # Booleans are ints; a coordinate of ``True`` is garbage, not 1.0.
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float | Decimal):
        out = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            out = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return out if math.isfinite(out) else None


def _coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        s = value.strip()
        # ``fromisoformat`` accepts a trailing ``Z`` on 3.11+; JSON exports
        # from document stores use it for UTC timestamps.
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            return None
    return None


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class Location:
    """A geographic point in decimal degrees.

    ``0.0`` is a valid coordinate (equator / prime meridian); presence is
    modelled by the enclosing ``Transaction.location`` being non-``None``.
    """

    lat: float
    lng: float

    @classmethod
    def from_mapping(cls, raw: Any) -> Location | None:
        """Build a location only when both ``lat`` and ``lng`` are numeric."""

        if not isinstance(raw, Mapping):
            return None
        lat = _coerce_coordinate(raw.get("lat"))
        lng = _coerce_coordinate(raw.get("lng"))
        if lat is None or lng is None:
            return None
        return cls(lat=lat, lng=lng)


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense record, read-only to this package.

    Attributes
    ----------
    id:
        Opaque stable identifier (string, ObjectId text, int; never inspected).
    type:
        Raw type label. Only ``"income"`` and ``"expense"`` participate in
        type-scoped sums.
    amount:
        Raw amount as delivered. May be a number, a numeric string, ``None`` or
        garbage; see :func:`finance_tracker.filters.parse_amount`.
    category, description:
        Optional labels.
    date:
        Point in time used for calendar month/year bucketing, or ``None`` when
        absent or unparseable.
    location:
        Optional geotag; present only when both coordinates are numeric.
    """

    id: Any = None
    type: str | None = None
    amount: Any = None
    category: str | None = None
    description: str | None = None
    date: datetime | None = None
    location: Location | None = None

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> Transaction:
        """Build a record from a raw mapping, tolerating absent/odd fields.

        ``_id`` is accepted as the identifier when ``id`` is missing (document
        store exports). The amount is carried through untouched.
        """

        tx_id = record.get("id")
        if tx_id is None:
            tx_id = record.get("_id")
        return cls(
            id=tx_id,
            type=_optional_text(record.get("type")),
            amount=record.get("amount"),
            category=_optional_text(record.get("category")),
            description=_optional_text(record.get("description")),
            date=_coerce_datetime(record.get("date")),
            location=Location.from_mapping(record.get("location")),
        )


type Transactions = Iterable[Transaction]
"""Any iterable of transactions; engines materialize it once per call."""


# ---------------------------------------------------------------------------
# Aggregation outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PeriodTotals:
    """Income/expense totals for one calendar month."""

    year: int
    month: int
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True, slots=True)
class PercentChange:
    """Month-over-month change in percent, or the absence of a baseline.

    ``value`` is rounded to one decimal place. ``None`` means the previous
    period total was zero, which is reported distinctly from ``0.0``.
    """

    value: Decimal | None

    @property
    def has_baseline(self) -> bool:
        return self.value is not None

    @property
    def label(self) -> str:
        if self.value is None:
            return "No data last month"
        sign = "+" if self.value > 0 else ""
        return f"{sign}{self.value}% from last month"


NO_BASELINE = PercentChange(value=None)
"""Sentinel change result used when the previous period total is zero."""


@dataclass(frozen=True, slots=True)
class DerivedStatistics:
    """Dashboard statistics derived from a transaction snapshot.

    ``total_income``, ``total_expense`` and ``balance`` cover the entire
    collection. ``category_totals`` groups expenses with a defined category in
    first-seen order; expenses without one are summed separately into
    ``uncategorized_expense`` instead of a synthetic key. ``recent`` is the
    first few records in the caller's order (the engine never sorts).
    """

    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    current_month: PeriodTotals
    previous_month: PeriodTotals
    income_change: PercentChange
    expense_change: PercentChange
    category_totals: Mapping[str, Decimal]
    uncategorized_expense: Decimal
    recent: tuple[Transaction, ...] = field(default_factory=tuple)

    def category_shares(self) -> dict[str, Decimal]:
        """Return each category's share of ``total_expense`` in percent.

        Shares are rounded to one decimal. When there is no expense total the
        breakdown is empty rather than a division by zero.
        """

        if self.total_expense == 0:
            return {}
        return {
            name: round_one_decimal(amount / self.total_expense * 100)
            for name, amount in self.category_totals.items()
        }


@dataclass(frozen=True, slots=True)
class TransactionSummary:
    """Bounded context handed to the remote AI collaborator (no raw records)."""

    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    categories: tuple[str, ...]
    count: int


# ---------------------------------------------------------------------------
# Geo outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OffsetMarker:
    """A render-ready map marker.

    ``lat``/``lng`` are the displaced coordinates; ``original_lat`` and
    ``original_lng`` keep the recorded position. ``occurrence`` is the 0-based
    index of this record within its coordinate group.
    """

    id: Any
    lat: float
    lng: float
    original_lat: float
    original_lng: float
    occurrence: int
    category: str | None
    description: str | None
    amount: Any
    type: str | None


@dataclass(frozen=True, slots=True)
class MapView:
    """Markers plus the center/zoom policy a consuming map view applies."""

    markers: tuple[OffsetMarker, ...]
    center: tuple[float, float]
    zoom_hint: int
    has_center: bool


__all__ = [
    "EXPENSE",
    "INCOME",
    "NO_BASELINE",
    "DerivedStatistics",
    "Location",
    "MapView",
    "OffsetMarker",
    "PercentChange",
    "PeriodTotals",
    "Transaction",
    "TransactionSummary",
    "TransactionType",
    "Transactions",
]
