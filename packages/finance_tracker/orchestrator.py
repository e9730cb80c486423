"""Question answering with a local fallback.

Public API:
    - :func:`answer_query`: returns an explicit two-branch result,
      :class:`AiAnswer` or :class:`FallbackAnswer`.
    - :func:`answer`: convenience wrapper returning only the text.

The remote AI collaborator is tried exactly once per call with a bounded
summary of the transactions. Any failure (no client, raised exception,
``success`` false, missing or blank ``answer``) switches to the local
:mod:`finance_tracker.intents` resolver. Neither function raises for
collaborator failures; the caller always receives an answer, produced by
exactly one of the two paths.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .aggregation import summarize
from .intents import resolve_intent
from .logging_setup import get_logger
from .models import Transaction, Transactions, TransactionSummary

_logger = get_logger("finance_tracker.orchestrator")


class AiClient(Protocol):
    """Remote completion collaborator.

    ``complete`` may be sync or async. It returns a mapping shaped like
    ``{"success": bool, "answer": str}`` or raises on transport errors.
    """

    def complete(
        self, question: str, summary: TransactionSummary
    ) -> Mapping[str, Any] | Awaitable[Mapping[str, Any]]: ...


class CompletionBody(BaseModel):
    """Validated view of a collaborator response body."""

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    success: bool = True
    answer: str | None = None

    @field_validator("answer")
    @classmethod
    def _blank_answer_is_missing(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v


@dataclass(frozen=True, slots=True)
class AiAnswer:
    text: str
    source: Literal["ai"] = "ai"


@dataclass(frozen=True, slots=True)
class FallbackAnswer:
    """A locally resolved answer plus why the AI path was not used."""

    text: str
    rule: str
    reason: str
    source: Literal["fallback"] = "fallback"


type QueryAnswer = AiAnswer | FallbackAnswer


class _AiUnavailable(Exception):
    """Internal signal: the AI path produced no usable answer."""


async def _call_ai(
    ai_client: AiClient, question: str, summary: TransactionSummary
) -> str:
    try:
        result = ai_client.complete(question, summary)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:  # noqa: BLE001 - any collaborator failure means fallback
        raise _AiUnavailable(f"{type(e).__name__}: {e}") from e

    if not isinstance(result, Mapping):
        raise _AiUnavailable(f"unexpected response type {type(result).__name__}")
    try:
        body = CompletionBody.model_validate(dict(result))
    except ValidationError as e:
        raise _AiUnavailable(f"invalid response body ({e.error_count()} error(s))") from e
    if not body.success:
        raise _AiUnavailable(f"unsuccessful response: {result.get('error') or 'no detail'}")
    if body.answer is None:
        raise _AiUnavailable("response missing answer")
    return body.answer


async def answer_query(
    question: str,
    transactions: Transactions,
    ai_client: AiClient | None,
    *,
    today: date | None = None,
) -> QueryAnswer:
    """Answer ``question`` via the AI collaborator, else via local rules.

    ``ai_client=None`` goes straight to the local resolver. ``today`` anchors
    month-scoped local answers (defaults to the current date).
    """

    items: tuple[Transaction, ...] = tuple(transactions)

    if ai_client is None:
        reason = "no AI client configured"
    else:
        try:
            text = await _call_ai(ai_client, question, summarize(items))
        except _AiUnavailable as e:
            reason = str(e)
        else:
            _logger.info("Answered via AI collaborator")
            return AiAnswer(text=text)

    _logger.warning("AI response unavailable, using fallback: %s", reason)
    resolution = resolve_intent(question, items, today=today)
    if resolution is None:  # pragma: no cover - the default table ends with a catch-all
        raise RuntimeError("intent table has no catch-all rule")
    return FallbackAnswer(text=resolution.answer, rule=resolution.rule, reason=reason)


async def answer(
    question: str,
    transactions: Transactions,
    ai_client: AiClient | None,
    *,
    today: date | None = None,
) -> str:
    """Return only the answer text of :func:`answer_query`."""

    result = await answer_query(question, transactions, ai_client, today=today)
    return result.text


__all__ = [
    "AiAnswer",
    "AiClient",
    "CompletionBody",
    "FallbackAnswer",
    "QueryAnswer",
    "answer",
    "answer_query",
]
