"""Persistent session storage."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from .const import REFRESH_TOKEN_KEY, TOKEN_KEY, USER_KEY
from .exceptions import ApiError
from .mapping import map_user, user_to_payload
from .models import User

_LOGGER = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String key-value storage that survives restarts."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Storage kept in a dict; state is lost with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._items


class JsonFileStorage:
    """Storage backed by a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _LOGGER.warning("Session storage %s is not valid JSON; ignoring it", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")


class SessionStore:
    """Tokens and user profile persisted under fixed keys."""

    def __init__(self, backend: KeyValueStorage | None = None) -> None:
        self._backend = backend if backend is not None else MemoryStorage()

    @property
    def backend(self) -> KeyValueStorage:
        return self._backend

    @property
    def token(self) -> str | None:
        return self._backend.get_item(TOKEN_KEY) or None

    @property
    def refresh_token(self) -> str | None:
        return self._backend.get_item(REFRESH_TOKEN_KEY) or None

    @property
    def user(self) -> User | None:
        raw = self._backend.get_item(USER_KEY)
        if not raw:
            return None
        try:
            return map_user(json.loads(raw))
        except (json.JSONDecodeError, ApiError):
            _LOGGER.warning("Stored user profile is unreadable; ignoring it")
            return None

    def save_tokens(self, token: str, refresh_token: str | None = None) -> None:
        self._backend.set_item(TOKEN_KEY, token)
        if refresh_token:
            self._backend.set_item(REFRESH_TOKEN_KEY, refresh_token)

    def save_user(self, user: User) -> None:
        self._backend.set_item(USER_KEY, json.dumps(user_to_payload(user)))

    def clear(self) -> None:
        for key in (TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self._backend.remove_item(key)
