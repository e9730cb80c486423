"""Load transaction snapshots from JSON exports.

Accepted shapes:

- a top-level array of transaction objects, or
- an object with a ``transactions`` array (API responses wrap records this way).

Individual records are converted with :meth:`Transaction.from_mapping`, which
tolerates missing or malformed fields; only the envelope is validated strictly.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from .logging_setup import get_logger
from .models import Transaction

_logger = get_logger("finance_tracker.ingest")


class TransactionExport(BaseModel):
    """Envelope of a JSON export; record contents are validated downstream."""

    model_config = ConfigDict(extra="ignore")

    transactions: list[Any]


def parse_transactions(payload: Any) -> list[Transaction]:
    """Convert a decoded JSON payload into transactions.

    Raises ``pydantic.ValidationError`` when the envelope is neither an array
    nor an object with a ``transactions`` array. Non-object entries are skipped.
    """

    if isinstance(payload, list):
        payload = {"transactions": payload}
    export = TransactionExport.model_validate(payload)

    out: list[Transaction] = []
    for pos, record in enumerate(export.transactions):
        if not isinstance(record, Mapping):
            _logger.warning("Skipping non-object transaction entry at position %d", pos)
            continue
        out.append(Transaction.from_mapping(record))
    return out


def load_transactions(path: str | PathLike[str]) -> list[Transaction]:
    """Read a JSON export from ``path``; see :func:`parse_transactions`."""

    p = Path(path)
    with p.open(encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
    transactions = parse_transactions(payload)
    _logger.info("Loaded %d transaction(s) from %s", len(transactions), p)
    return transactions


__all__ = ["TransactionExport", "load_transactions", "parse_transactions"]
