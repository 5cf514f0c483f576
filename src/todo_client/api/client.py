# src/todo_client/api/client.py

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.errors import RemoteRejection, TransportError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ApiResponse:
    status_code: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


def _flatten_messages(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    if isinstance(raw, Mapping):
        out: list[str] = []
        for v in raw.values():
            out.extend(_flatten_messages(v))
        return out
    if isinstance(raw, (list, tuple)):
        out = []
        for v in raw:
            out.extend(_flatten_messages(v))
        return out
    return [str(raw)]


def rejection_message(data: Any, default: str, *, prefer_message: bool = False) -> str:
    """
    Human-readable text for a declined request.

    Field errors ({"errors": {"email": ["taken"]}}) win over a top-level
    "message", which may itself be a string or a list. With `prefer_message`
    the order is reversed. Lines are joined with "\n".
    """
    if isinstance(data, Mapping):
        keys = ("message", "errors") if prefer_message else ("errors", "message")
        for key in keys:
            lines = _flatten_messages(data.get(key))
            if lines:
                return "\n".join(lines)
    return default


def message_or(data: Any, default: str) -> str:
    """The server's acknowledgement text ({"message": "..."}) or `default`."""
    if isinstance(data, Mapping):
        msg = data.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return default


def rejection_from(resp: ApiResponse, default: str, *, prefer_message: bool = False) -> RemoteRejection:
    field_errors: dict[str, list[str]] = {}
    if isinstance(resp.data, Mapping) and isinstance(resp.data.get("errors"), Mapping):
        for k, v in resp.data["errors"].items():
            field_errors[str(k)] = _flatten_messages(v)
    return RemoteRejection(
        rejection_message(resp.data, default, prefer_message=prefer_message),
        status_code=resp.status_code,
        field_errors=field_errors,
    )


class ApiClient:
    """
    Thin JSON-over-HTTP client for the todo backend.

    - One shared httpx.AsyncClient (connection pooling, base URL, timeout).
    - Transport failures and undecodable bodies become TransportError.
    - Status codes are NOT interpreted here; services decide what 401/4xx mean.
    - No retries.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self._client.request(
                method,
                path,
                headers=headers,
                json=dict(json_body) if json_body is not None else None,
            )
        except httpx.TimeoutException as e:
            logger.info("%s %s timed out (%s)", method, path, e.__class__.__name__)
            raise TransportError("The server did not answer in time.") from e
        except httpx.HTTPError as e:
            logger.info("%s %s failed: %s", method, path, e.__class__.__name__)
            raise TransportError("Unable to connect to the server. Check that it is running.") from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)

        if not resp.content:
            return ApiResponse(resp.status_code, None)

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            # A 401 with an HTML body still means "unauthorized"; keep the status usable.
            if resp.status_code == 401:
                return ApiResponse(resp.status_code, None)
            logger.warning("%s %s returned a non-JSON body (status=%s)", method, path, resp.status_code)
            raise TransportError("Invalid response from the server.") from e

        return ApiResponse(resp.status_code, data)
