from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import pytest

from pyzonaazul.exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from pyzonaazul.gateway import ApiGateway
from pyzonaazul.navigation import MemoryNavigator
from pyzonaazul.storage import SessionStore


class _FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        *,
        status: int = 200,
        reason: str | None = None,
        text_data: str = "",
        json_error: Exception | None = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self._payload = payload
        self._text_data = text_data
        self._json_error = json_error

    async def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def text(self) -> str:
        return self._text_data


class _FakeRequestContext:
    def __init__(self, response: _FakeResponse) -> None:
        self._response = response

    async def __aenter__(self) -> _FakeResponse:
        return self._response

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class _SequenceSession:
    def __init__(self, responses: list[object]) -> None:
        self._responses = responses
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeRequestContext:
        self.calls.append({"method": method, "url": url, "kwargs": kwargs})
        response = self._responses[len(self.calls) - 1]
        if isinstance(response, Exception):
            raise response
        return _FakeRequestContext(response)

    async def close(self) -> None:
        self.closed = True


def _gateway(
    responses: list[object],
    *,
    token: str | None = "access",
    pathname: str = "/dashboard",
    retry_count: int = 0,
) -> tuple[ApiGateway, _SequenceSession, SessionStore, MemoryNavigator]:
    session = _SequenceSession(responses)
    store = SessionStore()
    if token:
        store.save_tokens(token, "refresh")
    navigator = MemoryNavigator(pathname)
    gateway = ApiGateway(
        session,  # type: ignore[arg-type]
        store,
        navigator,
        base_url="https://api.example.com/",
        api_uri="/api/v1/",
        retry_count=retry_count,
        redirect_delay=0.01,
    )
    return gateway, session, store, navigator


def test_build_url_validation() -> None:
    gateway, _, _, _ = _gateway([])
    assert gateway.base_url == "https://api.example.com/api/v1"
    assert gateway._build_url("zones") == "https://api.example.com/api/v1/zones"
    with pytest.raises(ValidationError):
        gateway._build_url("")
    with pytest.raises(ValidationError):
        gateway._build_url("https://evil.example.com/zones")


@pytest.mark.asyncio
async def test_bearer_token_attached_to_requests() -> None:
    gateway, session, _, _ = _gateway([_FakeResponse({"ok": True}), _FakeResponse({"id": "z"})])

    assert await gateway.get("/zones", params={"status": "active"}) == {"ok": True}
    await gateway.post("/zones", {"code": "Z01"})

    get_headers = session.calls[0]["kwargs"]["headers"]
    assert get_headers["Authorization"] == "Bearer access"
    assert "Content-Type" not in get_headers
    assert session.calls[0]["kwargs"]["params"] == {"status": "active"}
    post_kwargs = session.calls[1]["kwargs"]
    assert post_kwargs["headers"]["Content-Type"] == "application/json"
    assert post_kwargs["json"] == {"code": "Z01"}
    assert session.calls[1]["url"] == "https://api.example.com/api/v1/zones"


@pytest.mark.asyncio
async def test_no_authorization_header_without_token() -> None:
    gateway, session, _, _ = _gateway([_FakeResponse({})], token=None)
    await gateway.get("/notifications/public/00000007")
    assert "Authorization" not in session.calls[0]["kwargs"]["headers"]


@pytest.mark.asyncio
async def test_no_content_returns_none() -> None:
    gateway, _, _, _ = _gateway([_FakeResponse(status=204)])
    assert await gateway.delete("/zones/z1") is None


@pytest.mark.asyncio
async def test_server_error_message_is_kept_verbatim() -> None:
    gateway, _, _, _ = _gateway(
        [_FakeResponse({"error": {"message": "Zona já existe", "code": "ZONE_EXISTS"}}, status=409)]
    )
    with pytest.raises(ApiError) as err:
        await gateway.post("/zones", {"code": "Z01"})
    assert err.value.as_dict() == {"message": "Zona já existe", "code": "ZONE_EXISTS", "status": 409}


@pytest.mark.asyncio
async def test_error_message_falls_back_to_reason_then_default() -> None:
    gateway, _, _, _ = _gateway(
        [
            _FakeResponse(status=500, reason="Internal Server Error", json_error=ValueError("x")),
            _FakeResponse({}, status=502),
        ]
    )
    with pytest.raises(ApiError) as err:
        await gateway.get("/zones")
    assert str(err.value) == "Internal Server Error"
    assert err.value.status == 500
    with pytest.raises(ApiError) as err:
        await gateway.get("/zones")
    assert str(err.value) == "An error occurred"


@pytest.mark.asyncio
async def test_status_mapping() -> None:
    gateway, _, _, _ = _gateway(
        [
            _FakeResponse({"message": "Forbidden"}, status=403),
            _FakeResponse({"error": {"message": "Notificação não encontrada"}}, status=404),
        ]
    )
    with pytest.raises(PermissionDeniedError):
        await gateway.get("/fiscal-settlements/pending")
    with pytest.raises(NotFoundError) as err:
        await gateway.get("/notifications/public/999")
    assert str(err.value) == "Notificação não encontrada"


@pytest.mark.asyncio
async def test_invalid_json_raises_api_error() -> None:
    gateway, _, _, _ = _gateway([_FakeResponse(json_error=ValueError("bad json"))])
    with pytest.raises(ApiError):
        await gateway.get("/zones")


@pytest.mark.asyncio
async def test_network_error_has_status_zero() -> None:
    gateway, _, _, _ = _gateway([aiohttp.ClientError("boom")])
    with pytest.raises(NetworkError) as err:
        await gateway.get("/zones")
    assert err.value.as_dict()["code"] == "NETWORK_ERROR"
    assert err.value.status == 0


@pytest.mark.asyncio
async def test_get_retries_network_errors_but_post_does_not() -> None:
    gateway, session, _, _ = _gateway(
        [TimeoutError(), _FakeResponse({"ok": True}), aiohttp.ClientError("boom")],
        retry_count=1,
    )
    assert await gateway.get("/zones") == {"ok": True}
    assert len(session.calls) == 2
    with pytest.raises(NetworkError):
        await gateway.post("/zones", {})
    assert len(session.calls) == 3


@pytest.mark.asyncio
async def test_unauthorized_clears_session_and_redirects_after_delay() -> None:
    gateway, _, store, navigator = _gateway([_FakeResponse({}, status=401)])

    with pytest.raises(AuthError) as err:
        await gateway.get("/zones")
    assert err.value.status == 401
    assert store.token is None
    assert navigator.pathname == "/dashboard"

    await asyncio.sleep(0.05)
    assert navigator.pathname == "/login"


@pytest.mark.asyncio
async def test_redirect_skipped_when_user_already_moved_to_login() -> None:
    gateway, _, _, navigator = _gateway([_FakeResponse({}, status=401)])

    with pytest.raises(AuthError):
        await gateway.get("/users/me")
    navigator.navigate("/login")
    await asyncio.sleep(0.05)
    assert navigator.history == ["/dashboard", "/login"]


@pytest.mark.asyncio
async def test_unauthorized_on_login_request_keeps_state() -> None:
    gateway, _, store, navigator = _gateway([_FakeResponse({}, status=401)], pathname="/login")

    with pytest.raises(AuthError):
        await gateway.post("/auth/login", {"email": "a@b.c", "password": "wrong"})
    await asyncio.sleep(0.05)
    assert store.token == "access"
    assert navigator.history == ["/login"]


@pytest.mark.asyncio
async def test_unauthorized_login_request_from_another_page_keeps_state() -> None:
    gateway, _, store, navigator = _gateway([_FakeResponse({}, status=401)])

    with pytest.raises(AuthError):
        await gateway.post("/auth/login", {"email": "a@b.c", "password": "wrong"})
    await asyncio.sleep(0.05)
    assert store.token == "access"
    assert navigator.history == ["/dashboard"]


@pytest.mark.asyncio
async def test_unauthorized_while_on_login_page_keeps_state() -> None:
    gateway, _, store, navigator = _gateway([_FakeResponse({}, status=401)], pathname="/login")

    with pytest.raises(AuthError):
        await gateway.get("/users/me")
    await asyncio.sleep(0.05)
    assert store.token == "access"
    assert navigator.history == ["/login"]


@pytest.mark.asyncio
async def test_unauthorized_notifies_listeners() -> None:
    gateway, _, _, _ = _gateway([_FakeResponse({}, status=401), _FakeResponse({}, status=401)])
    events: list[str] = []
    gateway.add_unauthorized_listener(lambda: events.append("signed out"))

    with pytest.raises(AuthError):
        await gateway.post("/auth/login", {"email": "a@b.c", "password": "wrong"})
    assert events == []
    with pytest.raises(AuthError):
        await gateway.get("/zones")
    assert events == ["signed out"]
    await gateway.aclose()


@pytest.mark.asyncio
async def test_unauthorized_on_public_notification_page_is_exempt() -> None:
    gateway, _, store, navigator = _gateway(
        [_FakeResponse({}, status=401)],
        pathname="/notificacao",
    )

    with pytest.raises(AuthError):
        await gateway.get("/notifications/public/00000007")
    await asyncio.sleep(0.05)
    assert store.token == "access"
    assert navigator.pathname == "/notificacao"


@pytest.mark.asyncio
async def test_aclose_cancels_pending_redirect() -> None:
    gateway, session, _, navigator = _gateway([_FakeResponse({}, status=401)])

    with pytest.raises(AuthError):
        await gateway.get("/zones")
    await gateway.aclose()
    await asyncio.sleep(0.05)
    assert navigator.pathname == "/dashboard"
    assert session.closed is False
