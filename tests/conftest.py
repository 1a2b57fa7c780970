"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop DOCBACKFILL_* settings before each test.

    The CLI calls load_dotenv() at import, so a developer's local .env would
    otherwise leak into config tests.
    """
    for name in list(os.environ):
        if name.startswith("DOCBACKFILL_"):
            monkeypatch.delenv(name)
