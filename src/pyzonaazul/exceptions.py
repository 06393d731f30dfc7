"""Library exceptions."""

from __future__ import annotations

from typing import Any

from .const import NETWORK_ERROR_CODE


class ZonaAzulError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
        status: int | None = None,
    ) -> None:
        text = message or detail or ""
        super().__init__(text)
        self.error_code = error_code or self.default_code
        self.detail = detail or text
        self.user_message = user_message
        self.status = status

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, Any]:
        """Return the uniform error shape shown to users."""
        return {
            "message": self.user_message or self.message,
            "code": self.error_code,
            "status": self.status,
        }


class ValidationError(ZonaAzulError):
    """Raised when inputs fail client-side validation."""

    error_type = "validation"
    default_code = "validation_error"


class AuthError(ZonaAzulError):
    """Raised when authentication fails."""

    error_type = "auth"
    default_code = "auth_error"


class PermissionDeniedError(AuthError):
    """Raised when the authenticated user may not use a workflow."""

    error_type = "permission"
    default_code = "permission_denied"


class NotFoundError(ZonaAzulError):
    """Raised when the API reports a missing resource."""

    error_type = "not_found"
    default_code = "not_found"


class ApiError(ZonaAzulError):
    """Raised when the API returns an error or an unexpected payload."""

    error_type = "api"
    default_code = "api_error"


class NetworkError(ZonaAzulError):
    """Raised when no response was received."""

    error_type = "network"
    default_code = NETWORK_ERROR_CODE

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
        status: int | None = 0,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            detail=detail,
            user_message=user_message,
            status=status,
        )


class WorkflowStateError(ZonaAzulError):
    """Raised when an action is not allowed in the current server state."""

    error_type = "state"
    default_code = "invalid_state"


class ConfigError(ZonaAzulError):
    """Raised when client configuration is invalid."""

    error_type = "config"
    default_code = "config_error"
