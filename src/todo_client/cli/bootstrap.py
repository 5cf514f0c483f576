# src/todo_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the HTTP client, credential store and services into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..api.client import ApiClient
from ..auth.session import SessionManager
from ..config import Settings, get_settings
from ..core.state import AppState
from ..profile.service import ProfileService
from ..storage.credential_store import CredentialStore
from ..tasks.task_sync import TaskSyncEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.credentials_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easy to
    test against a fake backend. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    api = ApiClient(
        settings.api_base_url,
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )
    credentials = CredentialStore(settings.credentials_db_path)
    session = SessionManager(api, credentials)

    state = AppState(
        settings=settings,
        api=api,
        credentials=credentials,
        session=session,
        profile=ProfileService(session),
        tasks=TaskSyncEngine(session),
    )
    logger.debug("State created api=%s", settings.api_base_url)
    return state


async def close_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.api.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)
