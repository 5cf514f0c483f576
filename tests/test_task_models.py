# tests/test_task_models.py

from __future__ import annotations

from datetime import date

import pytest

from todo_client.core.errors import TransportError, ValidationError
from todo_client.core.models import User
from todo_client.tasks.task_models import Priority, TaskItem, TaskPatch


def test_task_item_from_wire_is_lenient_on_optional_fields() -> None:
    item = TaskItem.from_wire(
        {"id": 5, "title": "x", "priority": "URGENT", "due_date": "2024-05-01T00:00:00.000000Z", "completed": 1}
    )
    assert item.priority is Priority.MEDIUM
    assert item.due_date == date(2024, 5, 1)
    assert item.completed is True
    assert item.description is None


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"title": "no id"},
        {"id": 1},
        {"id": 1, "title": "x", "due_date": "someday"},
    ],
)
def test_task_item_from_wire_rejects_malformed(payload) -> None:
    with pytest.raises(TransportError):
        TaskItem.from_wire(payload)


def test_patch_sends_only_given_fields() -> None:
    assert TaskPatch(completed=True).to_wire() == {"completed": True}
    assert TaskPatch(title=" t ", due_date=None).to_wire() == {"title": "t", "due_date": None}
    assert TaskPatch().is_empty()


def test_patch_validation() -> None:
    with pytest.raises(ValidationError):
        TaskPatch(title="  ").validate()
    with pytest.raises(ValidationError):
        TaskPatch(priority="urgent").validate()
    TaskPatch(priority="HIGH").validate()


def test_user_defaults_and_shallow_merge() -> None:
    user = User.from_wire({"id": 1, "name": "Ana", "email": "a@b.com", "created_at": "2024-01-01"})
    assert user.role == "user"
    assert user.status == "active"

    merged = user.merged_with({"name": "Ana Maria", "status": "suspended"})
    assert merged.name == "Ana Maria"
    assert merged.status == "suspended"
    assert merged.email == "a@b.com"
    assert merged.extra == {"created_at": "2024-01-01"}
