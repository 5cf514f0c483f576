# tests/test_credential_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

from todo_client.core.models import Session, User
from todo_client.storage.credential_store import CredentialStore


def _user(**extra) -> User:
    return User(id=1, name="Ana", email="a@b.com", extra=extra)


def test_load_is_none_until_saved(tmp_path: Path) -> None:
    store = CredentialStore(tmp_path / "creds.sqlite3")
    assert store.load() is None


def test_save_load_clear(tmp_path: Path) -> None:
    store = CredentialStore(tmp_path / "creds.sqlite3")
    store.save(Session(token="T1", user=_user(created_at="2024-01-01")))

    loaded = store.load()
    assert loaded is not None
    assert loaded.token == "T1"
    assert loaded.user.name == "Ana"
    assert loaded.user.extra == {"created_at": "2024-01-01"}

    store.save(Session(token="T2", user=_user()))
    assert store.load().token == "T2"

    store.clear()
    assert store.load() is None
    # idempotent
    store.clear()
    assert store.load() is None


def test_session_survives_restart(tmp_path: Path) -> None:
    db = tmp_path / "creds.sqlite3"
    CredentialStore(db).save(Session(token="T1", user=_user()))

    reopened = CredentialStore(db)
    loaded = reopened.load()
    assert loaded is not None
    assert loaded.token == "T1"
    assert loaded.user.email == "a@b.com"


def test_token_without_user_is_absent(tmp_path: Path) -> None:
    db = tmp_path / "creds.sqlite3"
    store = CredentialStore(db)

    conn = sqlite3.connect(str(db))
    with conn:
        conn.execute("INSERT INTO kv(key, value) VALUES ('token', 'T1')")
    conn.close()

    assert store.load() is None


def test_registration_is_kept_apart_from_session(tmp_path: Path) -> None:
    store = CredentialStore(tmp_path / "creds.sqlite3")
    store.remember_registration(_user())

    assert store.load() is None
    last = store.last_registration()
    assert last is not None and last.email == "a@b.com"

    store.clear()
    assert store.last_registration() is None
