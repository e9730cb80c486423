# ruff: noqa: I001
"""CLI for the ``finance_tracker`` package.

This module exposes callable command handlers (``cmd_stats``,
``cmd_markers``, ``cmd_ask``) and a Typer-based console interface around them.
Environment variables (notably ``OPENAI_API_KEY``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Business logic lives
in the engine modules; handlers only load input, call the engines and print.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .formatting import format_currency
from .logging_setup import configure_logging
from .models import Transaction


def _load(json_path: str) -> list[Transaction] | None:
    """Load transactions, printing a concise error and returning ``None`` on failure."""

    from .ingest import load_transactions

    try:
        return load_transactions(json_path)
    except FileNotFoundError:
        print(f"Error: File not found: {json_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {json_path}", file=sys.stderr)
    except (ValueError, ValidationError) as e:
        print(f"Error: Failed to parse transactions: {e}", file=sys.stderr)
    return None


def cmd_stats(json_path: str, *, reference_date: str | None = None) -> int:
    """Print dashboard statistics for a JSON export.

    Output: overall totals, current/previous month cards with change labels,
    the expense breakdown by category (with shares) and the leading records.
    Returns ``0`` on success, ``1`` on input errors.
    """

    from .aggregation import aggregate

    ref: datetime | None = None
    if reference_date:
        try:
            ref = datetime.fromisoformat(reference_date)
        except ValueError:
            print(
                f"Error: invalid --reference-date {reference_date!r} (expected YYYY-MM-DD)",
                file=sys.stderr,
            )
            return 1

    transactions = _load(json_path)
    if transactions is None:
        return 1

    stats = aggregate(transactions, ref)
    cur, prev = stats.current_month, stats.previous_month
    print(f"Total income:\t{format_currency(stats.total_income)}")
    print(f"Total expenses:\t{format_currency(stats.total_expense)}")
    print(f"Balance:\t{format_currency(stats.balance)}")
    print(
        f"{cur.year:04d}-{cur.month:02d} income:\t{format_currency(cur.income)}"
        f"\t({stats.income_change.label})"
    )
    print(
        f"{cur.year:04d}-{cur.month:02d} expenses:\t{format_currency(cur.expense)}"
        f"\t({stats.expense_change.label})"
    )
    print(f"{prev.year:04d}-{prev.month:02d} balance:\t{format_currency(prev.balance)}")

    shares = stats.category_shares()
    for name, amount in stats.category_totals.items():
        print(f"category\t{name}\t{format_currency(amount)}\t{shares.get(name, 0)}%")
    if stats.uncategorized_expense:
        print(f"uncategorized\t{format_currency(stats.uncategorized_expense)}")

    for tx in stats.recent:
        sign = "+" if tx.type == "income" else "-"
        print(
            f"recent\t{tx.id or ''}\t{sign}{tx.amount}"
            f"\t{tx.category or ''}\t{tx.description or ''}"
        )
    return 0


def cmd_markers(json_path: str) -> int:
    """Print the map center/zoom and one offset marker per geo-tagged record."""

    from .geo import map_view

    transactions = _load(json_path)
    if transactions is None:
        return 1

    view = map_view(transactions)
    print(f"center\t{view.center[0]:.5f}\t{view.center[1]:.5f}\tzoom={view.zoom_hint}")
    for m in view.markers:
        print(f"{m.id or ''}\t{m.lat:.6f}\t{m.lng:.6f}\t{m.category or ''}\t{m.description or ''}")
    return 0


def cmd_ask(question: str, json_path: str, *, offline: bool = False) -> int:
    """Answer a finance question about the transactions in ``json_path``.

    Uses the OpenAI-backed collaborator unless ``offline`` is set; failures
    fall back to local rules, so only input errors yield a non-zero status.
    """

    from .ai_client import OpenAIFinanceClient
    from .orchestrator import answer_query

    if not question.strip():
        print("Error: question must be non-empty.", file=sys.stderr)
        return 1

    transactions = _load(json_path)
    if transactions is None:
        return 1

    client = None if offline else OpenAIFinanceClient()
    result = asyncio.run(answer_query(question, transactions, client))
    print(result.text)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Dashboard statistics, map markers and finance Q&A over a JSON transaction export. "
        "Loads OPENAI_API_KEY from a local .env before running."
    ),
)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
JSON_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--json-path",
    help="Path to a JSON export: an array of transactions or {'transactions': [...]}",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)


@app.command("stats")
def stats_cmd(
    json_path: Annotated[Path, JSON_PATH_OPTION],
    *,
    reference_date: str | None = typer.Option(
        None, help="Date (YYYY-MM-DD) defining the current month; defaults to today."
    ),
) -> None:
    """Totals, month-over-month change and category breakdown."""

    raise typer.Exit(cmd_stats(str(json_path), reference_date=reference_date))


@app.command("markers")
def markers_cmd(json_path: Annotated[Path, JSON_PATH_OPTION]) -> None:
    """Map markers with duplicate coordinates spread apart."""

    raise typer.Exit(cmd_markers(str(json_path)))


@app.command("ask")
def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question to answer.")],
    json_path: Annotated[Path, JSON_PATH_OPTION],
    *,
    offline: bool = typer.Option(
        False, help="Skip the remote AI and answer with local rules only."
    ),
) -> None:
    """Answer a finance question, falling back to local rules."""

    raise typer.Exit(cmd_ask(question, str(json_path), offline=offline))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m finance_tracker.cli`
    app()
