# src/todo_client/core/errors.py

"""
Failure taxonomy shared by every service.

- ValidationError: input rejected locally, nothing was sent.
- RemoteRejection: the server answered and declined.
- TransportError: no authoritative answer (network, timeout, malformed body).
- SessionInvalid: the bearer token was refused; the session is already torn down
  by the time the caller sees it.
"""

from __future__ import annotations

from collections.abc import Mapping


class ClientError(Exception):
    """Base class for every outcome the front-end renders as a failure."""

    default_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.user_message = (message or "").strip() or self.default_message
        super().__init__(self.user_message)


class ValidationError(ClientError):
    default_message = "Invalid input."


class RemoteRejection(ClientError):
    default_message = "The server rejected the request."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        field_errors: Mapping[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.field_errors: dict[str, list[str]] = dict(field_errors or {})


class TransportError(ClientError):
    default_message = "Unable to reach the server."


class SessionInvalid(ClientError):
    default_message = "Your session has expired. Please log in again."
