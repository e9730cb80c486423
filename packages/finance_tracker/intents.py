"""Local answers to finance questions when the remote AI is unavailable.

The resolver is a fixed, ordered table of :class:`IntentRule` entries. Each
rule pairs a predicate over the question text with a handler producing the
answer. Rules are evaluated top to bottom and the first match wins, so the
table order *is* the precedence (e.g. a month-scoped balance question is
answered by the month rule, which sits above the generic balance rule).

Matching is case-insensitive regex search on the raw question; no stemming or
punctuation stripping is applied. The last rule is a catch-all, so
:func:`resolve` always returns a string.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from .filters import filter_month, sum_amounts
from .formatting import format_currency
from .logging_setup import get_logger
from .models import EXPENSE, INCOME, Transaction, Transactions

_logger = get_logger("finance_tracker.intents")

MONTH_NAMES: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

# ---- Fixed texts -------------------------------------------------------------

FINANCE_DEFINITION = (
    "Finance is the management of money and other assets. It involves activities such as "
    "saving, investing, borrowing, budgeting, and planning for future expenses. Finance "
    "helps individuals and organizations make informed decisions about how to use resources "
    "to achieve their goals."
)
SAVINGS_ADVICE = (
    "To improve your savings and manage income better: 1) Track all expenses, 2) Set a "
    "monthly budget, 3) Prioritize essential spending, 4) Use the 50/30/20 rule: 50% needs, "
    "30% wants, 20% savings. Start by saving 10-20% of your income first."
)
INVESTMENT_ADVICE = (
    "Start with emergency funds (3-6 months expenses), then consider low-risk options like "
    "mutual funds, government bonds, or index funds. Always research and never invest more "
    "than you can afford to lose. Consider starting with SIP (Systematic Investment Plans)."
)
DEBT_ADVICE = (
    "Focus on high-interest debt first (credit cards, personal loans). Consider debt "
    "consolidation if you have multiple loans. Always pay more than minimum payments when "
    "possible. Create a debt payoff plan and stick to it."
)
GREETING = (
    "Hello! I'm your finance assistant. I can help you understand your spending patterns, "
    "calculate balances, and provide general financial advice. What would you like to know?"
)
CAPABILITIES = (
    "I can help you with: checking your balance, calculating income/expenses, budgeting "
    "tips, investment advice, debt management, and general financial guidance. Just ask!"
)
EXPENSE_TIPS = (
    "To reduce expenses: track spending, identify non-essential items, negotiate bills, "
    "and look for cheaper alternatives."
)
INCOME_TIPS = (
    "To increase income: ask for raises, develop new skills, take on side projects, or "
    "explore passive income opportunities."
)
DEFAULT_ANSWER = (
    "I can help you track your finances and provide general financial advice. Try asking "
    "about your balance, income, expenses, savings, investments, or general money "
    "management tips."
)

# ---- Patterns ----------------------------------------------------------------

_DEFINITION_RE = re.compile(r"^(what is|define|explain) finance\??$", re.IGNORECASE)
# Deliberately whole-word rather than substring matching: "may" must not
# match inside "maybe", nor "march" inside "marching".
_MONTH_RE = re.compile(r"\b(" + "|".join(MONTH_NAMES) + r")\b", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(\d{4})\b")
_MONTH_TOPIC_RE = re.compile(r"income|expense|spent|balance", re.IGNORECASE)
_INCOME_RE = re.compile(r"income", re.IGNORECASE)
_EXPENSE_SPENT_RE = re.compile(r"expense|spent", re.IGNORECASE)
_BALANCE_RE = re.compile(r"balance", re.IGNORECASE)
_TOTAL_INCOME_RE = re.compile(r"total income", re.IGNORECASE)
_TOTAL_EXPENSE_RE = re.compile(r"total expense|total spent", re.IGNORECASE)
_SAVINGS_RE = re.compile(r"savings|save|budget|income management|money management", re.IGNORECASE)
_INVEST_RE = re.compile(r"investment|invest|grow money|wealth building", re.IGNORECASE)
_DEBT_RE = re.compile(r"debt|loan|credit|borrow", re.IGNORECASE)
# Deliberately whole-word rather than substring matching: a bare "hi" would
# otherwise greet questions containing "this" or "which".
_GREETING_RE = re.compile(r"\b(hi|hello|hey)\b", re.IGNORECASE)
_HELP_RE = re.compile(r"help|what can you do|capabilities", re.IGNORECASE)
_SPENDING_RE = re.compile(r"expense|spending|cost", re.IGNORECASE)
_EARNING_RE = re.compile(r"income|earn|salary", re.IGNORECASE)


# ---- Rule model --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IntentContext:
    """Inputs available to a rule handler."""

    question: str
    transactions: tuple[Transaction, ...]
    today: date


@dataclass(frozen=True, slots=True)
class IntentRule:
    """An ordered ``(predicate, handler)`` pair; see :data:`RULES`."""

    name: str
    predicate: Callable[[str], bool]
    handler: Callable[[IntentContext], str]

    def matches(self, question: str) -> bool:
        return self.predicate(question)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Which rule answered (0-based table position and name) and its answer."""

    index: int
    rule: str
    answer: str


def _searcher(pattern: re.Pattern[str]) -> Callable[[str], bool]:
    return lambda question: pattern.search(question) is not None


# ---- Handlers ----------------------------------------------------------------


def _is_definition_question(question: str) -> bool:
    return _DEFINITION_RE.search(question.strip()) is not None


def _answer_definition(_ctx: IntentContext) -> str:
    return FINANCE_DEFINITION


def _mentions_month_topic(question: str) -> bool:
    return _MONTH_RE.search(question) is not None and _MONTH_TOPIC_RE.search(question) is not None


def _answer_month(ctx: IntentContext) -> str:
    month_match = _MONTH_RE.search(ctx.question)
    if month_match is None:
        raise ValueError("month rule invoked without a month name in the question")
    month_name = month_match.group(1).lower()
    month = MONTH_NAMES.index(month_name) + 1
    year_match = _YEAR_RE.search(ctx.question)
    year = int(year_match.group(1)) if year_match else ctx.today.year
    label = f"{month_name.capitalize()} {year}"

    month_txs = filter_month(ctx.transactions, year, month)
    if _INCOME_RE.search(ctx.question):
        income = sum_amounts(month_txs, INCOME)
        return f"Your income for {label} is {format_currency(income)}."
    if _EXPENSE_SPENT_RE.search(ctx.question):
        expense = sum_amounts(month_txs, EXPENSE)
        return f"Your expenses for {label} are {format_currency(expense)}."
    income = sum_amounts(month_txs, INCOME)
    expense = sum_amounts(month_txs, EXPENSE)
    return (
        f"Your balance for {label} is {format_currency(income - expense)}. "
        f"Income: {format_currency(income)}, Expenses: {format_currency(expense)}."
    )


def _answer_balance(ctx: IntentContext) -> str:
    income = sum_amounts(ctx.transactions, INCOME)
    expense = sum_amounts(ctx.transactions, EXPENSE)
    return (
        f"Your current balance is {format_currency(income - expense)}. "
        f"Total income: {format_currency(income)}, "
        f"Total expenses: {format_currency(expense)}."
    )


def _mentions_total(question: str) -> bool:
    return bool(_TOTAL_INCOME_RE.search(question) or _TOTAL_EXPENSE_RE.search(question))


def _answer_total(ctx: IntentContext) -> str:
    if _TOTAL_INCOME_RE.search(ctx.question):
        return f"Your total income is {format_currency(sum_amounts(ctx.transactions, INCOME))}."
    return f"Your total expenses are {format_currency(sum_amounts(ctx.transactions, EXPENSE))}."


def _fixed(text: str) -> Callable[[IntentContext], str]:
    return lambda _ctx: text


def _answer_spending(ctx: IntentContext) -> str:
    total = format_currency(sum_amounts(ctx.transactions, EXPENSE))
    return f"Your total expenses are {total}. {EXPENSE_TIPS}"


def _answer_earning(ctx: IntentContext) -> str:
    total = format_currency(sum_amounts(ctx.transactions, INCOME))
    return f"Your total income is {total}. {INCOME_TIPS}"


# ---- Rule table --------------------------------------------------------------

RULES: tuple[IntentRule, ...] = (
    IntentRule("definition", _is_definition_question, _answer_definition),
    IntentRule("month", _mentions_month_topic, _answer_month),
    IntentRule("balance", _searcher(_BALANCE_RE), _answer_balance),
    IntentRule("total", _mentions_total, _answer_total),
    IntentRule("savings", _searcher(_SAVINGS_RE), _fixed(SAVINGS_ADVICE)),
    IntentRule("investment", _searcher(_INVEST_RE), _fixed(INVESTMENT_ADVICE)),
    IntentRule("debt", _searcher(_DEBT_RE), _fixed(DEBT_ADVICE)),
    IntentRule("greeting", _searcher(_GREETING_RE), _fixed(GREETING)),
    IntentRule("help", _searcher(_HELP_RE), _fixed(CAPABILITIES)),
    IntentRule("spending", _searcher(_SPENDING_RE), _answer_spending),
    IntentRule("earning", _searcher(_EARNING_RE), _answer_earning),
    IntentRule("default", lambda _q: True, _fixed(DEFAULT_ANSWER)),
)
"""The fallback rule table, in precedence order."""


def match_rule(question: str, rules: Sequence[IntentRule] = RULES) -> tuple[int, IntentRule] | None:
    """Return ``(index, rule)`` for the first matching rule, or ``None``.

    ``None`` is only possible for caller-supplied tables without a catch-all.
    """

    for index, rule in enumerate(rules):
        if rule.matches(question):
            return index, rule
    return None


def resolve_intent(
    question: str,
    transactions: Transactions,
    *,
    today: date | None = None,
    rules: Sequence[IntentRule] = RULES,
) -> Resolution | None:
    """Answer ``question`` with the first matching rule in ``rules``.

    ``today`` anchors the default year of month-scoped questions.
    """

    hit = match_rule(question, rules)
    if hit is None:
        return None
    index, rule = hit
    ctx = IntentContext(
        question=question,
        transactions=tuple(transactions),
        today=today or date.today(),
    )
    answer = rule.handler(ctx)
    _logger.debug("resolve: rule #%d (%s) matched", index, rule.name)
    return Resolution(index=index, rule=rule.name, answer=answer)


def resolve(question: str, transactions: Transactions, *, today: date | None = None) -> str:
    """Answer ``question`` locally; always returns a string."""

    resolution = resolve_intent(question, transactions, today=today)
    if resolution is None:  # pragma: no cover - the default table ends with a catch-all
        raise RuntimeError("intent table has no catch-all rule")
    return resolution.answer


__all__ = [
    "DEFAULT_ANSWER",
    "GREETING",
    "MONTH_NAMES",
    "RULES",
    "IntentContext",
    "IntentRule",
    "Resolution",
    "match_rule",
    "resolve",
    "resolve_intent",
]
