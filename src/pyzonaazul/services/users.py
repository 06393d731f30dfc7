"""User endpoints."""

from __future__ import annotations

from ..const import CURRENT_USER_ENDPOINT, FISCAL_USERS_ENDPOINT, USER_BY_CPF_ENDPOINT
from ..mapping import map_user, map_user_match
from ..models import User, UserMatch
from ..util import normalize_cpf
from .base import BaseService


class UserService(BaseService):
    async def me(self) -> User:
        data = await self._gateway.get(CURRENT_USER_ENDPOINT)
        return map_user(data)

    async def find_by_cpf(self, cpf: str) -> UserMatch | None:
        """Look up a registered driver by CPF; raises NotFoundError on 404."""
        digits = normalize_cpf(cpf)
        data = await self._gateway.get(f"{USER_BY_CPF_ENDPOINT}/{digits}")
        return map_user_match(data)

    async def create_fiscal(
        self,
        *,
        name: str,
        email: str,
        password: str,
        cpf: str | None = None,
        phone: str | None = None,
    ) -> User:
        payload: dict[str, str] = {"name": name, "email": email, "password": password}
        if cpf:
            payload["cpf"] = cpf
        if phone:
            payload["phone"] = phone
        data = await self._gateway.post(FISCAL_USERS_ENDPOINT, payload)
        self._invalidate("users")
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        return map_user(data)
