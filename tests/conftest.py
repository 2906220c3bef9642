"""Pytest configuration for test isolation.

The CLI loads ``.env`` from the working directory and reads several
``BTC_COST_BASIS_*`` environment variables; it also configures the package
logger once per process. Any of these leaking between tests (or from the
developer's shell) would change delays, endpoints, or where warnings go, so
every test gets a clean environment, its own working directory, and an
unconfigured package logger.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from btc_cost_basis.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ``BTC_COST_BASIS_*`` variables and run from a scratch directory."""

    for key in list(os.environ):
        if key.startswith("BTC_COST_BASIS_"):
            monkeypatch.delenv(key, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write ledger text to a temporary ``.csv`` file and return its path."""

    def _write(text: str, name: str = "transactions.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
