"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .const import (
    DEFAULT_API_URL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_QUERY_RETRY,
    DEFAULT_QUERY_STALE_TIME,
    DEFAULT_REDIRECT_DELAY,
    DEFAULT_TIMEOUT_SECONDS,
)
from .exceptions import ConfigError

ENV_PREFIX = "ZONAAZUL_"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    base_url: str = DEFAULT_API_URL
    api_uri: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retry_count: int = 0
    query_retry: int = DEFAULT_QUERY_RETRY
    query_stale_time: float = DEFAULT_QUERY_STALE_TIME
    poll_interval: float = DEFAULT_POLL_INTERVAL
    redirect_delay: float = DEFAULT_REDIRECT_DELAY
    storage_path: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.base_url, str) or not self.base_url.strip():
            raise ConfigError("base_url must be a non-empty string.")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive.")
        if self.retry_count < 0 or self.query_retry < 0:
            raise ConfigError("retry counts must not be negative.")
        if self.query_stale_time < 0:
            raise ConfigError("query_stale_time must not be negative.")
        if self.poll_interval <= 0:
            raise ConfigError("poll_interval must be positive.")
        if self.redirect_delay < 0:
            raise ConfigError("redirect_delay must not be negative.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value.strip() if value and value.strip() else None

        return cls(
            base_url=_get("API_URL") or DEFAULT_API_URL,
            api_uri=_get("API_URI"),
            timeout=_parse(_get("TIMEOUT"), float, DEFAULT_TIMEOUT_SECONDS, "TIMEOUT"),
            retry_count=_parse(_get("RETRY_COUNT"), int, 0, "RETRY_COUNT"),
            query_retry=_parse(_get("QUERY_RETRY"), int, DEFAULT_QUERY_RETRY, "QUERY_RETRY"),
            query_stale_time=_parse(
                _get("QUERY_STALE_TIME"), float, DEFAULT_QUERY_STALE_TIME, "QUERY_STALE_TIME"
            ),
            poll_interval=_parse(
                _get("POLL_INTERVAL"), float, DEFAULT_POLL_INTERVAL, "POLL_INTERVAL"
            ),
            storage_path=_get("STORAGE_PATH"),
        )


def _parse(raw: str | None, kind: type, default: float | int, name: str):
    if raw is None:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} is not a valid {kind.__name__}.") from exc
