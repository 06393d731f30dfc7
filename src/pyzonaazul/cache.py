"""Query result cache with invalidation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, TypeVar

from .const import DEFAULT_QUERY_RETRY, DEFAULT_QUERY_STALE_TIME
from .exceptions import ApiError, NetworkError, ZonaAzulError

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

QueryKey = tuple[Hashable, ...]


def is_transient(exc: ZonaAzulError) -> bool:
    """Return True for network failures and 5xx responses; never for 401."""
    if isinstance(exc, NetworkError):
        return True
    return isinstance(exc, ApiError) and exc.status is not None and exc.status >= 500


class QueryCache:
    """Holds the last result of each query.

    An entry is served by ``fetch`` only while it is younger than
    ``stale_time`` seconds; with the default of zero every fetch goes back to
    the server. Mutations drop dependent entries through ``invalidate``.
    """

    def __init__(
        self,
        *,
        retry: int = DEFAULT_QUERY_RETRY,
        retry_delay: float = 0.5,
        stale_time: float = DEFAULT_QUERY_STALE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[QueryKey, tuple[float, Any]] = {}
        self._retry = max(0, retry)
        self._retry_delay = max(0.0, retry_delay)
        self._stale_time = max(0.0, stale_time)
        self._clock = clock

    @property
    def stale_time(self) -> float:
        return self._stale_time

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: QueryKey) -> Any | None:
        entry = self._entries.get(key)
        return entry[1] if entry is not None else None

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def is_fresh(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        return self._clock() - entry[0] < self._stale_time

    async def fetch(
        self,
        key: QueryKey,
        loader: Callable[[], Awaitable[T]],
        *,
        retry: int | None = None,
        refresh: bool = False,
    ) -> T:
        if not refresh and self.is_fresh(key):
            return self._entries[key][1]
        retries = self._retry if retry is None else max(0, retry)
        attempt = 0
        while True:
            try:
                value = await loader()
            except ZonaAzulError as exc:
                if attempt >= retries or not is_transient(exc):
                    raise
                delay = min(self._retry_delay * (2**attempt), 30.0)
                attempt += 1
                _LOGGER.debug("Query %s failed (%s); retry %s/%s", key[0], exc, attempt, retries)
                if delay:
                    await asyncio.sleep(delay)
                continue
            self.set(key, value)
            return value

    def invalidate(self, *prefix: Hashable) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        size = len(prefix)
        stale = [key for key in self._entries if key[:size] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
