# src/todo_client/storage/credential_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
from pathlib import Path

from ..core.errors import TransportError
from ..core.models import Session, User

logger = logging.getLogger(__name__)

KEY_TOKEN = "token"
KEY_USER = "user"
KEY_REGISTRATION = "registration"


class CredentialStore:
    """
    SQLite key/value store for the bearer token and the last-known user.

    Token and user are written and removed in a single transaction, so a
    crash never leaves one without the other. Every method opens its own
    short-lived connection.

    No validation happens here; callers own the session rules.
    """

    def __init__(self, db_path: str | Path = "credentials.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        # The file holds a bearer token, keep it private on disk.
        with contextlib.suppress(OSError):
            os.chmod(self._db_path, 0o600)
        logger.info("CredentialStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read(self, *keys: str) -> dict[str, str]:
        conn = self._get_conn()
        try:
            placeholders = ",".join("?" for _ in keys)
            cur = conn.execute(f"SELECT key, value FROM kv WHERE key IN ({placeholders})", keys)
            return {row["key"]: row["value"] for row in cur.fetchall()}
        finally:
            conn.close()

    @staticmethod
    def _decode_user(raw: str | None) -> User | None:
        if not raw:
            return None
        try:
            return User.from_wire(json.loads(raw))
        except (ValueError, TransportError):
            logger.warning("Stored user record is unreadable; ignoring it.")
            return None

    # ---- public API ----

    def save(self, session: Session) -> None:
        user_json = json.dumps(session.user.to_wire(), ensure_ascii=False)
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO kv(key, value) VALUES (?, ?)",
                    [(KEY_TOKEN, session.token), (KEY_USER, user_json)],
                )
        finally:
            conn.close()
        logger.debug("Session saved user_id=%s", session.user.id)

    def load(self) -> Session | None:
        """Return the persisted session, or None if it was never saved or was cleared."""
        rows = self._read(KEY_TOKEN, KEY_USER)
        token = rows.get(KEY_TOKEN)
        user = self._decode_user(rows.get(KEY_USER))
        if not token or user is None:
            return None
        return Session(token=token, user=user)

    def clear(self) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    "DELETE FROM kv WHERE key IN (?, ?, ?)",
                    (KEY_TOKEN, KEY_USER, KEY_REGISTRATION),
                )
        finally:
            conn.close()
        logger.debug("Credentials cleared")

    def remember_registration(self, user: User) -> None:
        """
        Keep the user returned by registration.

        Stored under its own key so the token/user pair is never half-written.
        """
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv(key, value) VALUES (?, ?)",
                    (KEY_REGISTRATION, json.dumps(user.to_wire(), ensure_ascii=False)),
                )
        finally:
            conn.close()

    def last_registration(self) -> User | None:
        return self._decode_user(self._read(KEY_REGISTRATION).get(KEY_REGISTRATION))

