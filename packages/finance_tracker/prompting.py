"""Prompt construction for the finance assistant chat completion.

The remote model only ever sees aggregate context (totals, category names and
record count), never raw records, to keep the payload bounded.
"""

from __future__ import annotations

from .formatting import format_currency
from .models import TransactionSummary

NO_DATA_TEXT = "User has no transaction data yet."


def build_system_prompt() -> str:
    """Return the advisor persona and scope."""

    return (
        "You are an expert financial advisor and AI assistant. You help users with:\n"
        "- Personal finance management\n"
        "- Budgeting and expense tracking\n"
        "- Investment advice\n"
        "- Financial planning\n"
        "- Money management tips\n"
        "- Analysis of spending patterns\n\n"
        "Always provide practical, actionable advice. Be encouraging and supportive "
        "while being honest about financial realities."
    )


def build_summary_text(summary: TransactionSummary) -> str:
    if summary.count == 0:
        return NO_DATA_TEXT
    return (
        "User's Financial Data:\n"
        f"- Total Income: {format_currency(summary.total_income)}\n"
        f"- Total Expenses: {format_currency(summary.total_expense)}\n"
        f"- Net Balance: {format_currency(summary.balance)}\n"
        f"- Spending Categories: {', '.join(summary.categories)}\n"
        f"- Total Transactions: {summary.count}"
    )


def build_user_prompt(question: str, summary: TransactionSummary) -> str:
    return (
        f'User Question: "{question}"\n\n'
        f"{build_summary_text(summary)}\n\n"
        "Please provide a helpful, personalized response based on the user's question "
        "and financial data. Keep your response conversational, practical, and under "
        "200 words."
    )


__all__ = ["NO_DATA_TEXT", "build_summary_text", "build_system_prompt", "build_user_prompt"]
