# src/todo_client/profile/service.py

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..api.client import rejection_from
from ..auth.session import SessionManager, check_new_password, unwrap_user
from ..core.errors import RemoteRejection, TransportError, ValidationError
from ..core.models import ProfileEditRequest, User

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Read-through cache over `GET /api/user` plus profile edits.

    The cached user is whatever the session manager holds (restored from the
    credential store at startup); fresh server records always replace it.
    """

    def __init__(self, session: SessionManager) -> None:
        self._session = session

    @property
    def cached_user(self) -> User | None:
        return self._session.user

    async def fetch_current_user(self, token: str | None = None) -> User:
        """
        Authoritative user record, falling back to the cached copy when the
        server is unreachable or misbehaves. A 401 always logs out.
        """
        cached = self.cached_user
        try:
            resp = await self._session.authorized_request("GET", "/api/user", token=token)
            if not resp.ok:
                raise rejection_from(resp, "Unable to load the profile.")
            fresh = User.from_wire(unwrap_user(resp.data))
        except (TransportError, RemoteRejection) as e:
            if cached is not None:
                logger.warning("Profile refresh failed (%s); showing cached user.", e.user_message)
                return cached
            raise self._session.invalidate("Unable to load your profile. Please log in again.") from e

        self._session.replace_user(fresh)
        logger.debug("Profile refreshed user_id=%s", fresh.id)
        return fresh

    async def update_profile(
        self,
        edit: ProfileEditRequest,
        *,
        confirm_password: str | None = None,
        token: str | None = None,
    ) -> User:
        """
        Submit name/email/photo (and optionally a password change).

        `confirm_password` is the second entry of the new password; it is only
        compared locally and never sent.
        """
        validate_profile_edit(edit, confirm_password=confirm_password)

        resp = await self._session.authorized_request(
            "PUT", "/api/user/update", token=token, json_body=edit.to_wire()
        )
        if not resp.ok:
            raise rejection_from(resp, "Profile update failed.", prefer_message=True)

        returned = resp.data.get("user") if isinstance(resp.data, Mapping) else None
        if not isinstance(returned, Mapping):
            returned = {}

        cached = self.cached_user
        updated = cached.merged_with(returned) if cached is not None else User.from_wire(returned)
        self._session.replace_user(updated)
        logger.info("Profile updated user_id=%s password_changed=%s", updated.id, edit.password_change is not None)
        return updated


def validate_profile_edit(edit: ProfileEditRequest, *, confirm_password: str | None = None) -> None:
    if not edit.name or not edit.name.strip() or not edit.email or not edit.email.strip():
        raise ValidationError("Name and email are required.")
    change = edit.password_change
    if change is not None:
        check_new_password(change.new_password, confirmation=confirm_password or "")
