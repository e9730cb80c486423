"""Thin async client for the remote finance assistant (OpenAI chat completions).

Implements the :class:`finance_tracker.orchestrator.AiClient` contract:
``complete(question, summary)`` returns ``{"success": bool, "answer": str}``
or raises. Retries, quotas and streaming are deliberately absent; any failure
is handled one level up by the orchestrator's local fallback.

Configuration is read from the environment at call time, never at import:

- ``OPENAI_API_KEY``: required; without it the client reports
  ``success=False`` and makes no network call.
- ``FT_AI_MODEL``: chat model name (default ``gpt-3.5-turbo``).
- ``FT_AI_TIMEOUT_SEC``: request timeout in seconds (default ``30``).
"""

from __future__ import annotations

import os
from typing import Any

from openai import AsyncOpenAI

from . import prompting
from .logging_setup import get_logger
from .models import TransactionSummary

_DEFAULT_MODEL: str = "gpt-3.5-turbo"
_DEFAULT_TIMEOUT_SEC: float = 30.0
_MAX_TOKENS: int = 400
_TEMPERATURE: float = 0.7

_logger = get_logger("finance_tracker.ai_client")


def _resolve_model() -> str:
    model = os.getenv("FT_AI_MODEL")
    return model.strip() if model and model.strip() else _DEFAULT_MODEL


def _resolve_timeout() -> float:
    raw = os.getenv("FT_AI_TIMEOUT_SEC")
    try:
        timeout = float(raw) if raw else _DEFAULT_TIMEOUT_SEC
    except ValueError:
        _logger.warning("Ignoring non-numeric FT_AI_TIMEOUT_SEC=%r", raw)
        timeout = _DEFAULT_TIMEOUT_SEC
    return timeout if timeout > 0 else _DEFAULT_TIMEOUT_SEC


def _create_client(api_key: str, timeout: float) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, timeout=timeout)


def _extract_message_text(resp: Any) -> str | None:
    """Return ``choices[0].message.content`` or ``None`` when absent."""

    choices = getattr(resp, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None


class OpenAIFinanceClient:
    """AI collaborator backed by the OpenAI chat completions API."""

    def __init__(self, *, model: str | None = None, api_key: str | None = None) -> None:
        self._model = model
        self._api_key = api_key

    async def complete(self, question: str, summary: TransactionSummary) -> dict[str, Any]:
        api_key = self._api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            _logger.info("OPENAI_API_KEY not set; AI service not available")
            return {
                "success": False,
                "error": "AI service not available. Please check configuration.",
            }

        model = self._model or _resolve_model()
        _logger.info("AI finance request: model=%s, transactions=%d", model, summary.count)
        async with _create_client(api_key, _resolve_timeout()) as client:
            resp = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": prompting.build_system_prompt()},
                    {"role": "user", "content": prompting.build_user_prompt(question, summary)},
                ],
                max_tokens=_MAX_TOKENS,
                temperature=_TEMPERATURE,
            )
        text = _extract_message_text(resp)
        if text is None:
            return {"success": False, "error": "Unexpected chat completion shape: no content"}
        return {"success": True, "answer": text}


__all__ = ["OpenAIFinanceClient"]
