"""Pytest configuration for test isolation.

The AI client reads its configuration (``OPENAI_API_KEY``, ``FT_AI_MODEL``,
``FT_AI_TIMEOUT_SEC``) from the environment at call time. A developer's shell
or a local ``.env`` may have these set, which would let a test reach the real
API or pick up an unexpected model. An autouse fixture clears them so each test
opts in explicitly.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `finance_tracker` is importable
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_ai_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENAI_API_KEY", "FT_AI_MODEL", "FT_AI_TIMEOUT_SEC"):
        monkeypatch.delenv(name, raising=False)
