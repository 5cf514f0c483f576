# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_client.cli.bootstrap import create_initial_state
from todo_client.config import Settings
from todo_client.core.state import AppState

from .fakes import ANA_EMAIL, ANA_PASSWORD, FakeTodoBackend


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Explicit settings, so tests never depend on the developer's environment or .env."""
    return Settings(
        app_name="todo-test",
        log_level="DEBUG",
        api_base_url="http://testserver",
        http_timeout_seconds=5.0,
        console_enabled=False,
        data_dir=tmp_path,
        credentials_db_path=tmp_path / "credentials.sqlite3",
    )


@pytest.fixture()
def backend() -> FakeTodoBackend:
    b = FakeTodoBackend()
    b.add_user("Ana", ANA_EMAIL, ANA_PASSWORD)
    return b


@pytest.fixture()
def state(settings: Settings, backend: FakeTodoBackend) -> AppState:
    """
    AppState wired to the fake backend.

    NOTE: the credential store is the real SQLite one (under tmp_path) because
    its persistence is part of what we want to test.
    """
    return create_initial_state(settings=settings, transport=backend.transport())
