# src/todo_client/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any

from ..core.errors import TransportError, ValidationError
from ..core.models import require_mapping


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_wire(cls, raw: Any) -> Priority:
        # Unknown or missing priorities render as medium, like the server default.
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM

    @classmethod
    def parse(cls, raw: str) -> Priority:
        """Strict variant for user input."""
        try:
            return cls(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"Priority must be one of: {allowed}.") from None

    @property
    def label(self) -> str:
        return {"low": "Low", "medium": "Medium", "high": "High"}[self.value]


def parse_due_date(raw: Any) -> date | None:
    """Accept `YYYY-MM-DD` as well as full ISO timestamps (only the date part is kept)."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise TransportError("Malformed server response: due_date is not a string.")
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        raise TransportError(f"Malformed server response: bad due_date {raw!r}.") from None


def _parse_completed(raw: Any) -> bool:
    # Some backends serialize booleans as 0/1 or "0"/"1".
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes"}
    return bool(raw)


@dataclass(slots=True, frozen=True)
class TaskItem:
    id: int | str
    title: str
    description: str | None
    priority: Priority
    due_date: date | None
    completed: bool

    @classmethod
    def from_wire(cls, data: Any) -> TaskItem:
        raw = require_mapping(data, "todo")

        task_id = raw.get("id")
        if isinstance(task_id, bool) or not isinstance(task_id, (int, str)) or task_id == "":
            raise TransportError("Malformed server response: todo has no id.")

        title = raw.get("title")
        if not isinstance(title, str):
            raise TransportError(f"Malformed server response: todo {task_id} has no title.")

        description = raw.get("description")
        return cls(
            id=task_id,
            title=title,
            description=str(description) if description is not None else None,
            priority=Priority.from_wire(raw.get("priority")),
            due_date=parse_due_date(raw.get("due_date")),
            completed=_parse_completed(raw.get("completed")),
        )


@dataclass(slots=True, frozen=True)
class TaskDraft:
    """Form contents for a new task (or a full edit of an existing one)."""

    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None

    @classmethod
    def from_item(cls, item: TaskItem) -> TaskDraft:
        """Pre-fill an edit form from an existing item."""
        return cls(
            title=item.title,
            description=item.description or "",
            priority=item.priority,
            due_date=item.due_date,
        )

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Title is required.")
        _coerce_priority(self.priority)

    def to_wire(self) -> dict[str, Any]:
        return {
            "title": self.title.strip(),
            "description": (self.description or "").strip(),
            "priority": _coerce_priority(self.priority).value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }


def _coerce_priority(raw: Any) -> Priority:
    if isinstance(raw, Priority):
        return raw
    return Priority.parse(str(raw))


_UNSET: Any = object()


@dataclass(slots=True, frozen=True)
class TaskPatch:
    """
    Partial update. Only fields that were explicitly given are sent.

    `description=None` / `due_date=None` clear the value server-side;
    leaving a field at its default keeps it untouched.
    """

    title: Any = _UNSET
    description: Any = _UNSET
    priority: Any = _UNSET
    due_date: Any = _UNSET
    completed: Any = _UNSET

    @classmethod
    def from_draft(cls, draft: TaskDraft) -> TaskPatch:
        return cls(
            title=draft.title,
            description=draft.description,
            priority=draft.priority,
            due_date=draft.due_date,
        )

    def is_empty(self) -> bool:
        return not self.to_wire()

    def validate(self) -> None:
        if self.is_empty():
            raise ValidationError("Nothing to update.")
        if self.title is not _UNSET and (not isinstance(self.title, str) or not self.title.strip()):
            raise ValidationError("Title is required.")
        if self.priority is not _UNSET:
            _coerce_priority(self.priority)
        if self.completed is not _UNSET and not isinstance(self.completed, bool):
            raise ValidationError("Completed must be true or false.")

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.title is not _UNSET:
            body["title"] = self.title.strip() if isinstance(self.title, str) else self.title
        if self.description is not _UNSET:
            body["description"] = self.description.strip() if isinstance(self.description, str) else None
        if self.priority is not _UNSET:
            body["priority"] = _coerce_priority(self.priority).value
        if self.due_date is not _UNSET:
            body["due_date"] = self.due_date.isoformat() if self.due_date else None
        if self.completed is not _UNSET:
            body["completed"] = self.completed
        return body


@dataclass(slots=True, frozen=True)
class SyncResult:
    """Outcome of a mutation: the server's message plus the refreshed list."""

    message: str
    items: list[TaskItem]
