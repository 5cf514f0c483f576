# src/todo_client/tasks/task_sync.py

"""
Task sync engine.

The server is the only authority on task state. Every mutation is a two-step
protocol:
- send the mutation,
- re-fetch the whole list and replace the local snapshot.

There is no optimistic splicing. A mutation counts as finished only after the
refresh, and a refresh failure is reported to the caller even though the
mutation itself went through.

Concurrent mutations against the same id are not serialized.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..api.client import message_or, rejection_from
from ..auth.session import SessionManager
from ..core.errors import TransportError
from .task_models import SyncResult, TaskDraft, TaskItem, TaskPatch

logger = logging.getLogger(__name__)

TODOS_PATH = "/api/todos"


def _todo_path(task_id: int | str) -> str:
    return f"{TODOS_PATH}/{task_id}"


def parse_todo_list(data: Any) -> list[TaskItem]:
    if not isinstance(data, Mapping):
        raise TransportError("Malformed server response: expected an object with todos.")
    raw = data.get("todos")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TransportError("Malformed server response: todos is not a list.")
    return [TaskItem.from_wire(t) for t in raw]


class TaskSyncEngine:
    def __init__(self, session: SessionManager) -> None:
        self._session = session
        self._items: list[TaskItem] = []
        self._epoch = session.epoch

    @property
    def items(self) -> list[TaskItem]:
        """Last snapshot applied (copy); empty after a session change."""
        if not self._session.is_current(self._epoch):
            return []
        return list(self._items)

    def find(self, task_id: int | str) -> TaskItem | None:
        for item in self.items:
            if str(item.id) == str(task_id):
                return item
        return None

    async def list(self, token: str | None = None) -> list[TaskItem]:
        epoch = self._session.epoch
        resp = await self._session.authorized_request("GET", TODOS_PATH, token=token)
        if not resp.ok:
            raise rejection_from(resp, "Unable to load tasks.")

        items = parse_todo_list(resp.data)

        # Drop results that arrive after a login/logout happened mid-flight.
        if self._session.is_current(epoch):
            self._items = items
            self._epoch = epoch
        else:
            logger.info("Discarding stale task list (session changed during fetch).")
        logger.debug("Task list refreshed count=%d", len(items))
        return list(items)

    async def _mutate_then_refresh(
        self,
        method: str,
        path: str,
        *,
        token: str | None,
        body: Mapping[str, Any] | None,
        failure: str,
        success: str,
    ) -> SyncResult:
        resp = await self._session.authorized_request(method, path, token=token, json_body=body)
        if not resp.ok:
            raise rejection_from(resp, failure)

        message = message_or(resp.data, success)
        items = await self.list(token)
        return SyncResult(message=message, items=items)

    async def create(self, draft: TaskDraft, *, token: str | None = None) -> SyncResult:
        draft.validate()
        result = await self._mutate_then_refresh(
            "POST",
            TODOS_PATH,
            token=token,
            body=draft.to_wire(),
            failure="Unable to save the task.",
            success="Task created.",
        )
        logger.info("Task created title=%r", draft.title.strip())
        return result

    async def update(self, task_id: int | str, patch: TaskPatch, *, token: str | None = None) -> SyncResult:
        patch.validate()
        result = await self._mutate_then_refresh(
            "PUT",
            _todo_path(task_id),
            token=token,
            body=patch.to_wire(),
            failure="Unable to update the task.",
            success="Task updated.",
        )
        logger.info("Task updated id=%s fields=%s", task_id, sorted(patch.to_wire()))
        return result

    async def delete(self, task_id: int | str, *, token: str | None = None) -> SyncResult:
        # No local existence check: the server decides whether the id exists.
        result = await self._mutate_then_refresh(
            "DELETE",
            _todo_path(task_id),
            token=token,
            body=None,
            failure="Unable to delete the task.",
            success="Task deleted.",
        )
        logger.info("Task deleted id=%s", task_id)
        return result

    async def toggle_completed(self, item: TaskItem, *, token: str | None = None) -> SyncResult:
        return await self.update(item.id, TaskPatch(completed=not item.completed), token=token)
