"""Shared behavior for API resource services."""

from __future__ import annotations

from typing import Any

from ..cache import QueryCache
from ..exceptions import ValidationError
from ..gateway import ApiGateway


def query_params(**values: Any) -> dict[str, str]:
    """Build query parameters, dropping empty values and keeping camelCase names."""
    params: dict[str, str] = {}
    for key, value in values.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


def cache_key(name: str, params: dict[str, str] | None = None) -> tuple[str, ...]:
    if not params:
        return (name,)
    return (name, *(f"{key}={params[key]}" for key in sorted(params)))


class BaseService:
    """Base class for the thin wrappers around each REST resource."""

    def __init__(self, gateway: ApiGateway, cache: QueryCache) -> None:
        self._gateway = gateway
        self._cache = cache

    @property
    def cache(self) -> QueryCache:
        return self._cache

    def _require_id(self, value: Any, field: str) -> str:
        if value is None:
            raise ValidationError(f"{field} is required.")
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field} is required.")
        return text

    def _invalidate(self, *names: str) -> None:
        for name in names:
            self._cache.invalidate(name)
