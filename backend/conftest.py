"""Root conftest: test environment, log routing and per-test isolation."""

import os
from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# No handlers are installed here: records reach pytest's caplog handler as-is.
configure_structlog()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep connection/session ids bound in one test out of the next."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def _isolate_server_env(monkeypatch):
    """Keep GAME_* variables from the developer's shell out of settings under test."""
    for name in [key for key in os.environ if key.startswith("GAME_")]:
        monkeypatch.delenv(name)
