from pyzonaazul.exceptions import (
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


def test_error_defaults() -> None:
    exc = ZonaAzulError("base error")
    assert exc.error_type == "unknown"
    assert exc.error_code is None
    assert exc.detail == "base error"
    assert exc.user_message is None
    assert exc.status is None


def test_error_detail_fallback() -> None:
    exc = ApiError(detail="short detail")
    assert str(exc) == "short detail"
    assert exc.detail == "short detail"
    assert exc.error_code == "api_error"


def test_error_overrides() -> None:
    exc = ApiError(
        "Zone code already exists",
        error_code="ZONE_EXISTS",
        user_message="Código já cadastrado",
        status=409,
    )
    assert exc.error_type == "api"
    assert exc.error_code == "ZONE_EXISTS"
    assert exc.status == 409
    assert exc.as_dict() == {
        "message": "Código já cadastrado",
        "code": "ZONE_EXISTS",
        "status": 409,
    }


def test_as_dict_falls_back_to_message() -> None:
    exc = NotFoundError("Notification not found", status=404)
    assert exc.as_dict() == {"message": "Notification not found", "code": "not_found", "status": 404}


def test_network_error_has_status_zero() -> None:
    exc = NetworkError("offline")
    assert exc.error_code == "NETWORK_ERROR"
    assert exc.status == 0
    assert exc.error_type == "network"


def test_permission_denied_is_auth_error() -> None:
    exc = PermissionDeniedError("nope")
    assert isinstance(exc, AuthError)
    assert exc.error_type == "permission"


def test_error_types_have_codes() -> None:
    assert AuthError("nope").error_code == "auth_error"
    assert ValidationError("nope").error_code == "validation_error"
    assert PermissionDeniedError("nope").error_code == "permission_denied"
    assert WorkflowStateError("nope").error_code == "invalid_state"
    assert ConfigError("nope").error_code == "config_error"
