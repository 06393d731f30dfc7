"""pyZonaAzul package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .client import Client
from .config import ClientConfig
from .exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    WorkflowStateError,
    ZonaAzulError,
)
from .models import FiscalSettlement, Notification, Parking, PlateLookup, User, Zone
from .navigation import MemoryNavigator
from .storage import JsonFileStorage, MemoryStorage

try:
    __version__ = version("pyzonaazul")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "ApiError",
    "AuthError",
    "Client",
    "ClientConfig",
    "ConfigError",
    "FiscalSettlement",
    "JsonFileStorage",
    "MemoryNavigator",
    "MemoryStorage",
    "NetworkError",
    "NotFoundError",
    "Notification",
    "Parking",
    "PermissionDeniedError",
    "PlateLookup",
    "User",
    "ValidationError",
    "WorkflowStateError",
    "Zone",
    "ZonaAzulError",
    "__version__",
]
