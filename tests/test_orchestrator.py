# ruff: noqa: E402, I001
import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pytest

import finance_tracker.ai_client as ai_client_mod
from finance_tracker import AiAnswer, FallbackAnswer, Transaction, answer, answer_query
from finance_tracker.ai_client import OpenAIFinanceClient
from finance_tracker.intents import GREETING

from tests.helpers.ai_stub import AiClientStub, ChatCompletionsStub, SyncAiClientStub

TODAY = date(2024, 3, 20)


def _mk_transactions():
    return [
        Transaction(id="t1", type="income", amount=5000, category="salary", date=datetime(2024, 3, 1)),
        Transaction(id="t2", type="expense", amount=1200, category="food", date=datetime(2024, 3, 5)),
    ]


def _run(coro):
    return asyncio.run(coro)


# ---- Orchestrator ------------------------------------------------------------


def test_ai_answer_is_returned_verbatim_and_gets_summary():
    stub = AiClientStub(body={"success": True, "answer": "Spend less on food."})
    result = _run(answer_query("Any advice?", _mk_transactions(), stub, today=TODAY))

    assert result == AiAnswer(text="Spend less on food.")
    ((question, summary),) = stub.calls
    assert question == "Any advice?"
    assert summary.total_income == Decimal("5000")
    assert summary.total_expense == Decimal("1200")
    assert summary.categories == ("salary", "food")
    assert summary.count == 2


def test_network_error_falls_back_to_local_resolver():
    stub = AiClientStub(error=ConnectionError("connection refused"))
    text = _run(answer("hello", _mk_transactions(), stub, today=TODAY))
    assert text == GREETING


def test_sync_client_is_supported():
    stub = SyncAiClientStub(body={"success": True, "answer": "ok"})
    assert _run(answer("hi", [], stub, today=TODAY)) == "ok"


@pytest.mark.parametrize(
    ("body", "reason_fragment"),
    [
        ({"success": False, "error": "AI service not available."}, "unsuccessful"),
        ({"success": True}, "missing answer"),
        ({"success": True, "answer": "   "}, "missing answer"),
        ({"success": True, "answer": None}, "missing answer"),
        ({"success": "sometimes", "answer": "x"}, "invalid response body"),
        ("not a mapping", "unexpected response type"),
        (None, "unexpected response type"),
    ],
)
def test_bad_bodies_fall_back(body: Any, reason_fragment: str):
    stub = AiClientStub(body=body)
    result = _run(answer_query("What is my balance?", _mk_transactions(), stub, today=TODAY))

    assert isinstance(result, FallbackAnswer)
    assert result.rule == "balance"
    assert reason_fragment in result.reason
    assert result.text.startswith("Your current balance is ₹3,800.")


def test_raised_exception_of_any_kind_is_contained():
    stub = AiClientStub(error=RuntimeError("boom"))
    result = _run(answer_query("hello", [], stub, today=TODAY))
    assert isinstance(result, FallbackAnswer)
    assert result.reason == "RuntimeError: boom"


def test_no_client_goes_straight_to_fallback():
    result = _run(answer_query("total income", _mk_transactions(), None, today=TODAY))
    assert isinstance(result, FallbackAnswer)
    assert result.text == "Your total income is ₹5,000."
    assert result.reason == "no AI client configured"


def test_ai_is_called_once_without_retry():
    stub = AiClientStub(error=TimeoutError("slow"))
    _run(answer("hello", [], stub, today=TODAY))
    assert len(stub.calls) == 1


# ---- OpenAI-backed collaborator ---------------------------------------------


def test_openai_client_without_key_reports_unavailable(monkeypatch: pytest.MonkeyPatch):
    def _fail(*_a: Any, **_kw: Any):
        raise AssertionError("client must not be created without an API key")

    monkeypatch.setattr(ai_client_mod, "_create_client", _fail)
    from finance_tracker.aggregation import summarize

    body = _run(OpenAIFinanceClient().complete("hi", summarize([])))
    assert body["success"] is False


def test_openai_client_builds_chat_request(monkeypatch: pytest.MonkeyPatch):
    calls: list[dict[str, Any]] = []
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("FT_AI_MODEL", "gpt-test")
    stub = ChatCompletionsStub("Sure!", calls)
    monkeypatch.setattr(ai_client_mod, "_create_client", lambda api_key, timeout: stub)

    text = _run(answer("Can I afford a trip?", _mk_transactions(), OpenAIFinanceClient(), today=TODAY))

    assert text == "Sure!"
    (kwargs,) = calls
    assert kwargs["model"] == "gpt-test"
    assert kwargs["max_tokens"] == 400
    system, user = kwargs["messages"]
    assert system["role"] == "system"
    assert user["role"] == "user"
    assert 'User Question: "Can I afford a trip?"' in user["content"]
    assert "- Total Income: ₹5,000" in user["content"]
    assert "- Spending Categories: salary, food" in user["content"]
    assert "- Total Transactions: 2" in user["content"]
    assert stub.closed


def test_openai_client_empty_choices_fall_back(monkeypatch: pytest.MonkeyPatch):
    calls: list[dict[str, Any]] = []
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(
        ai_client_mod, "_create_client", lambda api_key, timeout: ChatCompletionsStub(None, calls)
    )

    result = _run(answer_query("hello", [], OpenAIFinanceClient(), today=TODAY))
    assert isinstance(result, FallbackAnswer)
    assert result.text == GREETING
    assert len(calls) == 1
