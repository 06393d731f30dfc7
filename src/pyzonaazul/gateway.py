"""HTTP gateway shared by every service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from .access import is_public_path
from .const import (
    DEFAULT_API_URL,
    DEFAULT_HEADERS,
    DEFAULT_REDIRECT_DELAY,
    DEFAULT_TIMEOUT_SECONDS,
    LOGIN_ENDPOINT,
    LOGIN_PATH,
)
from .exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .navigation import Navigator
from .storage import SessionStore

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_SECONDS)
_NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."


class ApiGateway:
    """Single HTTP client for the Zona Azul API.

    Attaches the stored bearer token to every request, normalizes error
    responses into library exceptions and reacts to HTTP 401 by clearing the
    stored session and sending the user back to the login view.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        store: SessionStore | None = None,
        navigator: Navigator | None = None,
        *,
        base_url: str | None = None,
        api_uri: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
        redirect_delay: float = DEFAULT_REDIRECT_DELAY,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._store = store if store is not None else SessionStore()
        self._navigator = navigator
        self._base_url = self._normalize_base_url(base_url or DEFAULT_API_URL)
        self._api_uri = self._normalize_api_uri(api_uri)
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)
        self._redirect_delay = max(0.0, redirect_delay)
        self._redirect_handle: asyncio.TimerHandle | None = None
        self._unauthorized_listeners: list[Callable[[], None]] = []

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def navigator(self) -> Navigator | None:
        return self._navigator

    @property
    def base_url(self) -> str:
        return f"{self._base_url}{self._api_uri}"

    def add_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        """Call ``listener`` whenever a 401 signs the session out."""
        self._unauthorized_listeners.append(listener)

    async def aclose(self) -> None:
        if self._redirect_handle is not None:
            self._redirect_handle.cancel()
            self._redirect_handle = None
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any | None = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any | None = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path, expect_json=False)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
        expect_json: bool = True,
    ) -> Any:
        url = self._build_url(path)
        request_kwargs: dict[str, Any] = {"headers": self._build_headers(has_body=json is not None)}
        if params:
            request_kwargs["params"] = dict(params)
        if json is not None:
            request_kwargs["json"] = json
        retries = self._retry_count if method.upper() == "GET" else 0
        attempts = retries + 1
        session = self._ensure_session()
        for attempt in range(attempts):
            try:
                async with session.request(
                    method,
                    url,
                    timeout=self._timeout,
                    **request_kwargs,
                ) as response:
                    if not 200 <= response.status < 300:
                        await self._raise_for_status(response, path)
                    if response.status == 204:
                        return None
                    if expect_json:
                        try:
                            return await response.json()
                        except (aiohttp.ContentTypeError, ValueError) as exc:
                            raise ApiError(
                                "Response did not contain valid JSON.",
                                status=response.status,
                            ) from exc
                    return await response.text()
            except (aiohttp.ClientError, TimeoutError) as exc:
                if attempt >= attempts - 1:
                    raise NetworkError(_NETWORK_ERROR_MESSAGE) from exc
                _LOGGER.debug("Retrying %s %s after network failure", method, path)
        raise NetworkError(_NETWORK_ERROR_MESSAGE)

    def _build_headers(self, *, has_body: bool) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if has_body:
            headers["Content-Type"] = "application/json"
        token = self._store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _raise_for_status(self, response: aiohttp.ClientResponse, path: str) -> None:
        status = response.status
        message, code = await self._error_details(response)
        if status == 401:
            self._handle_unauthorized(path)
            raise AuthError(message, error_code=code, status=status)
        if status == 403:
            raise PermissionDeniedError(message, error_code=code, status=status)
        if status == 404:
            raise NotFoundError(message, error_code=code, status=status)
        raise ApiError(message, error_code=code, status=status)

    async def _error_details(self, response: aiohttp.ClientResponse) -> tuple[str, str | None]:
        try:
            body = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            body = None
        message: Any = None
        code: Any = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                code = error.get("code")
            elif isinstance(body.get("message"), str):
                message = body["message"]
        if not isinstance(message, str) or not message:
            message = getattr(response, "reason", None) or "An error occurred"
        return message, code if isinstance(code, str) else None

    def _handle_unauthorized(self, path: str) -> None:
        if LOGIN_ENDPOINT in path:
            return
        current = self._navigator.pathname if self._navigator is not None else None
        if current is not None and is_public_path(current):
            return
        _LOGGER.warning("API rejected the session token; clearing stored session")
        self._store.clear()
        for listener in self._unauthorized_listeners:
            listener()
        self._schedule_login_redirect()

    def _schedule_login_redirect(self) -> None:
        if self._navigator is None or self._redirect_handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._redirect_handle = loop.call_later(self._redirect_delay, self._redirect_to_login)

    def _redirect_to_login(self) -> None:
        self._redirect_handle = None
        if self._navigator is None:
            return
        # The user may have navigated while the timer was pending.
        if self._navigator.pathname != LOGIN_PATH:
            self._navigator.navigate(LOGIN_PATH)

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building API requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{self._api_uri}{normalized_path}"

    def _normalize_base_url(self, base_url: str) -> str:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        return base_url.strip().rstrip("/")

    def _normalize_api_uri(self, api_uri: str | None) -> str:
        if api_uri is None:
            return ""
        if not isinstance(api_uri, str):
            raise ValidationError("api_uri must be a string.")
        normalized = api_uri.strip().strip("/")
        if not normalized:
            return ""
        return f"/{normalized}"
