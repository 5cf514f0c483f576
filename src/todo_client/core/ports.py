# src/todo_client/core/ports.py

"""
Ports (interfaces) used by the services.

Services depend on Protocols instead of concrete implementations, so the
SQLite credential store can be swapped for an in-memory one in tests.
"""

from __future__ import annotations

from typing import Protocol

from .models import Session, User


class CredentialRepo(Protocol):
    """Durable key/value persistence for the session (token + user, written together)."""

    def save(self, session: Session) -> None: ...
    def load(self) -> Session | None: ...
    def clear(self) -> None: ...

    # Registration does not create a session; its user is kept apart.
    def remember_registration(self, user: User) -> None: ...
    def last_registration(self) -> User | None: ...
