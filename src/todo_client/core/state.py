# src/todo_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..api.client import ApiClient
from ..auth.session import SessionManager
from ..config import Settings
from ..profile.service import ProfileService
from ..storage.credential_store import CredentialStore
from ..tasks.task_sync import TaskSyncEngine


@dataclass
class AppState:
    settings: Settings
    api: ApiClient
    credentials: CredentialStore
    session: SessionManager
    profile: ProfileService
    tasks: TaskSyncEngine
