# src/todo_client/core/models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import TransportError

# Keys the client understands; anything else the server sends is kept in User.extra.
_USER_KEYS = ("id", "name", "email", "photo", "role", "status")


def require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise TransportError(f"Malformed server response: expected an object for {what}.")
    return dict(data)


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


@dataclass(slots=True, frozen=True)
class User:
    id: int | str
    name: str
    email: str
    photo_ref: str | None = None
    role: str = "user"
    status: str = "active"
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, data: Any) -> User:
        raw = require_mapping(data, "user")

        user_id = raw.get("id")
        if isinstance(user_id, bool) or not isinstance(user_id, (int, str)) or user_id == "":
            raise TransportError("Malformed server response: user has no id.")

        name = raw.get("name")
        email = raw.get("email")
        if not isinstance(name, str) or not isinstance(email, str):
            raise TransportError("Malformed server response: user is missing name or email.")

        return cls(
            id=user_id,
            name=name,
            email=email,
            photo_ref=_opt_str(raw.get("photo")),
            role=_opt_str(raw.get("role")) or "user",
            status=_opt_str(raw.get("status")) or "active",
            extra={k: v for k, v in raw.items() if k not in _USER_KEYS},
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "photo": self.photo_ref,
            "role": self.role,
            "status": self.status,
        }

    def merged_with(self, update: Mapping[str, Any]) -> User:
        """Shallow merge: keys present in `update` win, everything else is kept."""
        return User.from_wire({**self.to_wire(), **dict(update)})


@dataclass(slots=True, frozen=True)
class Session:
    token: str
    user: User


@dataclass(slots=True, frozen=True)
class PasswordChange:
    current_password: str
    new_password: str


@dataclass(slots=True, frozen=True)
class ProfileEditRequest:
    name: str
    email: str
    photo_ref: str | None = None
    password_change: PasswordChange | None = None

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name.strip(), "email": self.email.strip()}
        # No photo means "keep the stored one".
        if self.photo_ref is not None:
            body["photo"] = self.photo_ref
        if self.password_change is not None:
            body["current_password"] = self.password_change.current_password
            body["new_password"] = self.password_change.new_password
        return body
