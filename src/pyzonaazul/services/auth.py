"""Authentication endpoints."""

from __future__ import annotations

import logging

from ..const import LOGIN_ENDPOINT, LOGOUT_ENDPOINT, REFRESH_ENDPOINT
from ..exceptions import ApiError
from ..mapping import map_login
from ..models import LoginResult
from .base import BaseService

_LOGGER = logging.getLogger(__name__)


class AuthService(BaseService):
    """Login, logout and token refresh."""

    async def login(self, email: str, password: str) -> LoginResult:
        _LOGGER.debug("Login request started")
        data = await self._gateway.post(LOGIN_ENDPOINT, {"email": email, "password": password})
        return map_login(data)

    async def logout(self, refresh_token: str | None) -> None:
        if not refresh_token:
            return
        await self._gateway.post(LOGOUT_ENDPOINT, {"refreshToken": refresh_token})

    async def refresh(self, refresh_token: str) -> str:
        data = await self._gateway.post(REFRESH_ENDPOINT, {"refreshToken": refresh_token})
        token = data.get("accessToken") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise ApiError("Refresh response did not include an access token.")
        return token
