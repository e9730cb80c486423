"""Public interface for the ``finance_tracker`` package.

This module re-exports the engine entry points and public models as the stable
import surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregation import aggregate, percent_change, previous_month, summarize
from .geo import DEFAULT_CENTER, UNIT_OFFSET, map_view, offset
from .intents import RULES, IntentRule, Resolution, match_rule, resolve, resolve_intent
from .models import (
    NO_BASELINE,
    DerivedStatistics,
    Location,
    MapView,
    OffsetMarker,
    PercentChange,
    PeriodTotals,
    Transaction,
    Transactions,
    TransactionSummary,
)
from .orchestrator import AiAnswer, AiClient, FallbackAnswer, QueryAnswer, answer, answer_query

__all__ = [
    # Aggregation
    "aggregate",
    "percent_change",
    "previous_month",
    "summarize",
    # Geo
    "DEFAULT_CENTER",
    "UNIT_OFFSET",
    "map_view",
    "offset",
    # Intents
    "RULES",
    "IntentRule",
    "Resolution",
    "match_rule",
    "resolve",
    "resolve_intent",
    # Orchestration
    "AiAnswer",
    "AiClient",
    "FallbackAnswer",
    "QueryAnswer",
    "answer",
    "answer_query",
    # Models / types
    "NO_BASELINE",
    "DerivedStatistics",
    "Location",
    "MapView",
    "OffsetMarker",
    "PercentChange",
    "PeriodTotals",
    "Transaction",
    "TransactionSummary",
    "Transactions",
]
