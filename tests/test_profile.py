# tests/test_profile.py

from __future__ import annotations

import pytest

from todo_client.auth.session import SessionState
from todo_client.core.errors import RemoteRejection, SessionInvalid, ValidationError
from todo_client.core.models import PasswordChange, ProfileEditRequest

from .fakes import ANA_EMAIL, login_ana


@pytest.mark.asyncio
async def test_fetch_current_user_fresh_record_wins(state, backend) -> None:
    await login_ana(state)
    backend.users[ANA_EMAIL].update(name="Ana Maria", role="admin")

    user = await state.profile.fetch_current_user()

    assert user.name == "Ana Maria"
    assert user.role == "admin"
    assert state.session.user == user
    assert state.credentials.load().user == user
    assert state.credentials.load().token == "T1"


@pytest.mark.asyncio
async def test_fetch_current_user_accepts_user_envelope(state, backend) -> None:
    await login_ana(state)
    backend.overrides[("GET", "/api/user")] = (200, {"user": {"id": 1, "name": "Wrapped", "email": ANA_EMAIL}})

    user = await state.profile.fetch_current_user()
    assert user.name == "Wrapped"
    assert user.status == "active"


@pytest.mark.asyncio
async def test_fetch_current_user_falls_back_to_cache_on_server_error(state, backend) -> None:
    await login_ana(state)
    backend.overrides[("GET", "/api/user")] = (500, {"message": "Server Error"})

    user = await state.profile.fetch_current_user()

    assert user.name == "Ana"
    assert state.session.is_logged_in


@pytest.mark.asyncio
async def test_fetch_current_user_falls_back_to_cache_when_offline(state, backend) -> None:
    await login_ana(state)
    backend.down = True

    user = await state.profile.fetch_current_user()

    assert user.email == ANA_EMAIL
    assert state.credentials.load() is not None


@pytest.mark.asyncio
async def test_fetch_current_user_unauthorized_logs_out(state, backend) -> None:
    await login_ana(state)
    backend.revoke_all_tokens()

    with pytest.raises(SessionInvalid):
        await state.profile.fetch_current_user()

    assert state.session.state is SessionState.LOGGED_OUT
    assert state.credentials.load() is None


@pytest.mark.asyncio
async def test_fetch_current_user_without_cache_propagates_session_invalid(state, backend) -> None:
    backend.down = True
    with pytest.raises(SessionInvalid):
        await state.profile.fetch_current_user(token="T-stale")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("new_password", "confirmation"),
    [("12345", "12345"), ("longenough", "different"), ("longenough", None)],
)
async def test_bad_password_change_never_hits_network(state, backend, new_password, confirmation) -> None:
    await login_ana(state)
    sent_before = len(backend.requests)

    edit = ProfileEditRequest(
        name="Ana",
        email=ANA_EMAIL,
        password_change=PasswordChange(current_password="secret1", new_password=new_password),
    )
    with pytest.raises(ValidationError):
        await state.profile.update_profile(edit, confirm_password=confirmation)

    assert len(backend.requests) == sent_before


@pytest.mark.asyncio
async def test_update_profile_requires_name_and_email(state, backend) -> None:
    await login_ana(state)
    with pytest.raises(ValidationError):
        await state.profile.update_profile(ProfileEditRequest(name=" ", email=ANA_EMAIL))
    with pytest.raises(ValidationError):
        await state.profile.update_profile(ProfileEditRequest(name="Ana", email=""))


@pytest.mark.asyncio
async def test_update_profile_merges_partial_response(state, backend) -> None:
    await login_ana(state)
    backend.partial_update_response = True

    user = await state.profile.update_profile(
        ProfileEditRequest(name="  Ana Maria ", email=ANA_EMAIL, photo_ref="file:///ana.jpg")
    )

    body = backend.calls("PUT", "/api/user/update")[0].body
    assert body == {"name": "Ana Maria", "email": ANA_EMAIL, "photo": "file:///ana.jpg"}

    # Only "name" came back; everything else is the cached copy.
    assert user.name == "Ana Maria"
    assert user.email == ANA_EMAIL
    assert user.id == 1
    assert user.extra["created_at"] == "2024-01-01T00:00:00Z"
    assert state.credentials.load().user == user


@pytest.mark.asyncio
async def test_password_change_is_sent_without_confirmation(state, backend) -> None:
    await login_ana(state)

    edit = ProfileEditRequest(
        name="Ana",
        email=ANA_EMAIL,
        password_change=PasswordChange(current_password="secret1", new_password="better-secret"),
    )
    await state.profile.update_profile(edit, confirm_password="better-secret")

    body = backend.calls("PUT", "/api/user/update")[0].body
    assert body["current_password"] == "secret1"
    assert body["new_password"] == "better-secret"
    assert "confirm_password" not in body
    assert backend.users[ANA_EMAIL]["password"] == "better-secret"


@pytest.mark.asyncio
async def test_update_profile_rejection_is_verbatim(state, backend) -> None:
    await login_ana(state)

    edit = ProfileEditRequest(
        name="Ana",
        email=ANA_EMAIL,
        password_change=PasswordChange(current_password="wrong", new_password="better-secret"),
    )
    with pytest.raises(RemoteRejection) as exc:
        await state.profile.update_profile(edit, confirm_password="better-secret")

    assert exc.value.user_message == "The current password is incorrect."
    assert state.session.user.name == "Ana"


@pytest.mark.asyncio
async def test_name_only_edit_keeps_existing_photo(state, backend) -> None:
    backend.users[ANA_EMAIL]["photo"] = "file:///ana.jpg"
    await login_ana(state)

    user = await state.profile.update_profile(ProfileEditRequest(name="Ana B", email=ANA_EMAIL))

    assert "photo" not in backend.calls("PUT", "/api/user/update")[0].body
    assert backend.users[ANA_EMAIL]["photo"] == "file:///ana.jpg"
    assert user.photo_ref == "file:///ana.jpg"
    assert state.credentials.load().user.photo_ref == "file:///ana.jpg"


@pytest.mark.asyncio
async def test_update_profile_shows_server_message_over_field_errors(state, backend) -> None:
    await login_ana(state)
    backend.overrides[("PUT", "/api/user/update")] = (
        422,
        {
            "message": "The email has already been taken.",
            "errors": {"email": ["taken"], "name": ["too long"]},
        },
    )

    with pytest.raises(RemoteRejection) as exc:
        await state.profile.update_profile(ProfileEditRequest(name="Ana", email="b@b.com"))

    assert exc.value.user_message == "The email has already been taken."
    assert exc.value.field_errors == {"email": ["taken"], "name": ["too long"]}
