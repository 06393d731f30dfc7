"""Current view tracking used by the gateway's 401 handling."""

from __future__ import annotations

from typing import Protocol


class Navigator(Protocol):
    """Where the user currently is, and how to send them elsewhere."""

    @property
    def pathname(self) -> str: ...

    def navigate(self, path: str) -> None: ...


class MemoryNavigator:
    """Navigator holding the current path in memory."""

    def __init__(self, pathname: str = "/") -> None:
        self._pathname = pathname
        self.history: list[str] = [pathname]

    @property
    def pathname(self) -> str:
        return self._pathname

    def navigate(self, path: str) -> None:
        self._pathname = path
        self.history.append(path)
