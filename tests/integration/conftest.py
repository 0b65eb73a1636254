"""Shared fixtures for integration tests.

These tests wire the real fetcher (httpx) and the real pipeline together,
with HTTP mocked at the transport level via respx.
"""

from __future__ import annotations

import os

import pytest
import respx


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host KWIKRESOLVER_* variables out of config precedence tests."""
    for name in list(os.environ):
        if name.startswith("KWIKRESOLVER_"):
            monkeypatch.delenv(name, raising=False)
