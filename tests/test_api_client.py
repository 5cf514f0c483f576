# tests/test_api_client.py

from __future__ import annotations

import httpx
import pytest

from todo_client.api.client import ApiClient, ApiResponse, rejection_from, rejection_message
from todo_client.core.errors import TransportError


def test_rejection_message_prefers_field_errors() -> None:
    data = {
        "message": "The given data was invalid.",
        "errors": {"email": ["The email has already been taken."], "password": ["Too short.", "Too weak."]},
    }
    assert rejection_message(data, "fallback") == (
        "The email has already been taken.\nToo short.\nToo weak."
    )


def test_rejection_message_accepts_message_list_and_falls_back() -> None:
    assert rejection_message({"message": ["a", "b"]}, "fallback") == "a\nb"
    assert rejection_message({"message": "nope"}, "fallback") == "nope"
    assert rejection_message({}, "fallback") == "fallback"
    assert rejection_message(None, "fallback") == "fallback"


def test_rejection_from_keeps_field_errors() -> None:
    err = rejection_from(ApiResponse(422, {"errors": {"email": ["taken"]}}), "failed")
    assert err.status_code == 422
    assert err.field_errors == {"email": ["taken"]}
    assert err.user_message == "taken"


@pytest.mark.asyncio
async def test_request_sends_bearer_and_accept_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    api = ApiClient("http://testserver", transport=httpx.MockTransport(handler))
    resp = await api.request("GET", "/api/user", token="T1")
    await api.aclose()

    assert resp.ok and resp.data == {"ok": True}
    assert seen[0].headers["Authorization"] == "Bearer T1"
    assert seen[0].headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    api = ApiClient("http://testserver", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        await api.request("GET", "/api/todos", token="T1")
    await api.aclose()


@pytest.mark.asyncio
async def test_non_json_body_is_transport_error_except_for_401() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        status = 401 if request.url.path == "/api/user" else 200
        return httpx.Response(status, text="<html>oops</html>")

    api = ApiClient("http://testserver", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        await api.request("GET", "/api/todos", token="T1")

    resp = await api.request("GET", "/api/user", token="T1")
    assert resp.unauthorized
    assert resp.data is None
    await api.aclose()


def test_rejection_message_can_prefer_top_level_message() -> None:
    data = {"message": "The email has already been taken.", "errors": {"email": ["taken"]}}
    assert rejection_message(data, "fallback", prefer_message=True) == "The email has already been taken."
    assert rejection_message({"errors": {"email": ["taken"]}}, "fallback", prefer_message=True) == "taken"
