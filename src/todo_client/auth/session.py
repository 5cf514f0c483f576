# src/todo_client/auth/session.py

"""
Session manager.

Owns the only Session value in the process and the auth state machine:

    LOGGED_OUT -> AUTHENTICATING -> LOGGED_IN
    LOGGED_IN  -> LOGGED_OUT   (logout, or any 401 on an authenticated call)

Other services never touch the credential store's token directly; they go
through `authorized_request()`, which also turns a 401 into a teardown.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from ..api.client import ApiClient, ApiResponse, message_or, rejection_from
from ..core.errors import ClientError, SessionInvalid, TransportError, ValidationError
from ..core.models import Session, User, require_mapping
from ..core.ports import CredentialRepo

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class SessionState(StrEnum):
    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    LOGGED_IN = "logged_in"


def _require(value: str | None, message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message)
    return value


def check_new_password(password: str, *, confirmation: str | None = None) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if confirmation is not None and confirmation != password:
        raise ValidationError("Passwords do not match.")


class SessionManager:
    def __init__(self, api: ApiClient, credentials: CredentialRepo) -> None:
        self._api = api
        self._credentials = credentials
        self._session: Session | None = None
        self._state = SessionState.LOGGED_OUT
        # Bumped on every transition; results fetched under an older epoch are stale.
        self._epoch = 0

    # ---- accessors ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    @property
    def user(self) -> User | None:
        return self._session.user if self._session else None

    @property
    def is_logged_in(self) -> bool:
        return self._state is SessionState.LOGGED_IN

    @property
    def epoch(self) -> int:
        return self._epoch

    def is_current(self, epoch: int) -> bool:
        """True if no session transition happened since `epoch` was read."""
        return epoch == self._epoch

    # ---- transitions ----

    def _enter_logged_in(self, session: Session) -> None:
        self._credentials.save(session)
        self._session = session
        self._state = SessionState.LOGGED_IN
        self._epoch += 1

    def _enter_logged_out(self) -> None:
        self._credentials.clear()
        self._session = None
        self._state = SessionState.LOGGED_OUT
        self._epoch += 1

    def replace_user(self, user: User) -> None:
        """Swap in a fresher user record for the current session (token unchanged)."""
        if self._session is None:
            return
        self._session = Session(token=self._session.token, user=user)
        self._credentials.save(self._session)

    def invalidate(self, reason: str | None = None) -> SessionInvalid:
        """
        Tear the session down after the server refused our token.

        Returns the error so callers can `raise session.invalidate()`.
        """
        if self._session is not None or self._state is not SessionState.LOGGED_OUT:
            logger.info("Session invalidated by server; logging out locally.")
        self._enter_logged_out()
        return SessionInvalid(reason)

    def resolve_token(self, token: str | None = None) -> str:
        token = token or self.token
        if not token:
            raise SessionInvalid("You are not logged in.")
        return token

    async def authorized_request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        """Bearer-authenticated request; a 401 tears the session down and raises SessionInvalid."""
        resp = await self._api.request(method, path, token=self.resolve_token(token), json_body=json_body)
        if resp.unauthorized:
            raise self.invalidate()
        return resp

    # ---- operations ----

    async def login(self, email: str, password: str) -> User:
        email = _require(email, "Please fill in email and password.").strip()
        _require(password, "Please fill in email and password.")

        # A failed attempt leaves the previous session (if any) untouched.
        prior = SessionState.LOGGED_IN if self._session is not None else SessionState.LOGGED_OUT
        self._state = SessionState.AUTHENTICATING
        try:
            resp = await self._api.request(
                "POST", "/api/login", json_body={"email": email, "password": password}
            )
            if not resp.ok:
                raise rejection_from(resp, "Login failed.")

            data = require_mapping(resp.data, "login response")
            token = data.get("token")
            if not isinstance(token, str) or not token.strip():
                raise TransportError("Malformed server response: no token in login response.")
            user = User.from_wire(data.get("user"))
        except ClientError:
            self._state = prior
            raise

        self._enter_logged_in(Session(token=token, user=user))
        logger.info("Logged in user_id=%s", user.id)
        return user

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        photo_ref: str | None = None,
    ) -> User:
        """
        Create an account. The backend does not hand out a token here, so the
        caller must log in explicitly afterwards; state stays LOGGED_OUT.
        """
        msg = "Please fill in all required fields."
        name = _require(name, msg).strip()
        email = _require(email, msg).strip()
        _require(password, msg)
        check_new_password(password)

        resp = await self._api.request(
            "POST",
            "/api/register",
            json_body={"name": name, "email": email, "password": password, "photo": photo_ref},
        )
        if not resp.ok:
            raise rejection_from(resp, "Registration failed.")

        data = require_mapping(resp.data, "register response")
        user = User.from_wire(data.get("user"))
        # Any token-shaped field in the response is ignored on purpose.
        self._credentials.remember_registration(user)
        logger.info("Registered user_id=%s (login required)", user.id)
        return user

    async def request_password_reset(self, email: str) -> str:
        email = _require(email, "Please enter your email address first.").strip()

        resp = await self._api.request("POST", "/api/forgot-password", json_body={"email": email})
        if not resp.ok:
            raise rejection_from(resp, "Unable to send the reset email.")

        logger.info("Password reset requested")
        return message_or(resp.data, "Check your inbox for a temporary password.")

    async def restore_session(self) -> User | None:
        """
        Startup check: validate a persisted token with one round trip.

        Returns the fresh user when the token is still valid; otherwise clears
        local credentials and returns None. Never raises for network problems.
        """
        stored = self._credentials.load()
        if stored is None:
            self._session = None
            self._state = SessionState.LOGGED_OUT
            return None

        self._state = SessionState.AUTHENTICATING
        try:
            resp = await self._api.request("GET", "/api/user", token=stored.token)
            if not resp.ok:
                logger.info("Stored session rejected (status=%s); clearing.", resp.status_code)
                self._enter_logged_out()
                return None
            user = User.from_wire(unwrap_user(resp.data))
        except TransportError:
            logger.info("Session check failed; clearing stored credentials.", exc_info=True)
            self._enter_logged_out()
            return None

        self._enter_logged_in(Session(token=stored.token, user=user))
        logger.info("Session restored user_id=%s", user.id)
        return user

    async def logout(self) -> None:
        token = self.token
        if token:
            try:
                resp = await self._api.request("POST", "/api/logout", token=token)
                if not resp.ok:
                    logger.info("Server logout returned status=%s (ignored)", resp.status_code)
            except TransportError:
                logger.warning("Server logout failed; logging out locally anyway.", exc_info=True)
        self._enter_logged_out()
        logger.info("Logged out")


def unwrap_user(data: Any) -> Any:
    """`GET /api/user` may answer with the bare record or with {"user": {...}}."""
    if isinstance(data, Mapping) and isinstance(data.get("user"), Mapping):
        return data["user"]
    return data

