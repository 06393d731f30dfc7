"""Mapping between API payloads and models."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from .exceptions import ApiError, ValidationError
from .models import (
    DashboardMetrics,
    FiscalParking,
    FiscalPayment,
    FiscalSettlement,
    FiscalStatistics,
    Location,
    LoginResult,
    Notification,
    NotificationPayment,
    Page,
    Pagination,
    Parking,
    PaymentIntent,
    PersonRef,
    PlateLookup,
    User,
    UserMatch,
    Zone,
    ZoneRef,
)
from .util import ensure_utc_timestamp, normalize_license_plate

T = TypeVar("T")


def require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ApiError(f"Response included invalid {what} data.")
    return data


def coerce_id(value: Any, field: str) -> str:
    if value is None:
        raise ApiError(f"Response missing {field}.")
    text = str(value).strip()
    if not text:
        raise ApiError(f"Response missing {field}.")
    return text


def parse_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0
        try:
            return int(stripped)
        except ValueError:
            return 0
    return 0


def parse_decimal(value: Any) -> Decimal:
    # Amounts arrive as numbers or as numeric strings ("5.00").
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        return Decimal(str(value).strip() or "0")
    except InvalidOperation:
        return Decimal("0")


def optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def optional_timestamp(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return ensure_utc_timestamp(value)
    except ValidationError:
        # Keep values the server sent in another format untouched.
        return value


def _plate(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ApiError(f"Response included invalid {what} plate.")
    try:
        return normalize_license_plate(value)
    except ValidationError as exc:
        raise ApiError(f"Response included invalid {what} plate.") from exc


def map_page(data: Any, item_mapper: Callable[[Any], T], what: str) -> Page[T]:
    payload = require_mapping(data, what)
    raw_items = payload.get("data")
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise ApiError(f"Response included invalid {what} list.")
    items = [item_mapper(item) for item in raw_items if isinstance(item, dict)]
    raw_pagination = payload.get("pagination")
    if isinstance(raw_pagination, dict):
        pagination = Pagination(
            page=parse_int(raw_pagination.get("page")) or 1,
            limit=parse_int(raw_pagination.get("limit")) or len(items),
            total=parse_int(raw_pagination.get("total")),
            total_pages=parse_int(raw_pagination.get("totalPages")),
        )
    else:
        pagination = Pagination(page=1, limit=len(items), total=len(items), total_pages=1)
    return Page(items=items, pagination=pagination)


def map_user(data: Any) -> User:
    payload = require_mapping(data, "user")
    role = payload.get("role")
    if not isinstance(role, str) or not role:
        raise ApiError("Response missing user role.")
    return User(
        id=coerce_id(payload.get("id"), "user id"),
        email=str(payload.get("email") or ""),
        name=str(payload.get("name") or ""),
        role=role,
        phone=optional_str(payload.get("phone")),
        avatar=optional_str(payload.get("avatar")),
        email_verified=payload.get("emailVerified") is True,
        phone_verified=payload.get("phoneVerified") is True,
        is_active=payload.get("isActive") is not False,
        last_login_at=optional_timestamp(payload.get("lastLoginAt")),
        created_at=optional_timestamp(payload.get("createdAt")),
        updated_at=optional_timestamp(payload.get("updatedAt")),
    )


def user_to_payload(user: User) -> dict[str, Any]:
    """Serialize a user in the API's own shape so ``map_user`` reads it back."""
    payload: dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "emailVerified": user.email_verified,
        "phoneVerified": user.phone_verified,
        "isActive": user.is_active,
    }
    optional = {
        "phone": user.phone,
        "avatar": user.avatar,
        "lastLoginAt": user.last_login_at,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


def map_login(data: Any) -> LoginResult:
    payload = require_mapping(data, "login")
    token = payload.get("token")
    if not isinstance(token, str) or not token:
        raise ApiError("Login response did not include a token.")
    refresh_token = payload.get("refreshToken")
    return LoginResult(
        token=token,
        refresh_token=str(refresh_token or ""),
        user=map_user(payload.get("user")),
        expires_in=parse_int(payload.get("expiresIn")) or None,
    )


def map_user_match(data: Any) -> UserMatch | None:
    payload = require_mapping(data, "user lookup")
    if payload.get("found") is not True or not isinstance(payload.get("user"), dict):
        return None
    user = payload["user"]
    return UserMatch(
        id=coerce_id(user.get("id"), "user id"),
        name=str(user.get("name") or ""),
        email=str(user.get("email") or ""),
        phone=optional_str(user.get("phone")),
        cpf=optional_str(user.get("cpf")),
    )


def optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def map_location(data: Any) -> Location | None:
    if not isinstance(data, dict):
        return None
    return Location(
        latitude=optional_float(data.get("latitude")),
        longitude=optional_float(data.get("longitude")),
        address=optional_str(data.get("address")),
    )


def location_to_payload(location: Location | None) -> dict[str, Any] | None:
    if location is None:
        return None
    payload = {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "address": location.address,
    }
    cleaned = {key: value for key, value in payload.items() if value is not None}
    return cleaned or None


def map_zone(data: Any) -> Zone:
    payload = require_mapping(data, "zone")
    return Zone(
        id=coerce_id(payload.get("id"), "zone id"),
        code=str(payload.get("code") or ""),
        name=str(payload.get("name") or ""),
        address=str(payload.get("address") or ""),
        price_per_period=parse_decimal(payload.get("pricePerPeriod")),
        period_minutes=parse_int(payload.get("periodMinutes")),
        max_time_minutes=parse_int(payload.get("maxTimeMinutes")),
        total_spots=parse_int(payload.get("totalSpots")),
        occupied_spots=parse_int(payload.get("occupiedSpots")),
        status=str(payload.get("status") or "active"),
        latitude=optional_str(payload.get("latitude")),
        longitude=optional_str(payload.get("longitude")),
        created_at=optional_timestamp(payload.get("createdAt")),
        updated_at=optional_timestamp(payload.get("updatedAt")),
    )


def map_zone_ref(data: Any) -> ZoneRef | None:
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    return ZoneRef(
        id=coerce_id(data.get("id"), "zone id"),
        name=str(data.get("name") or ""),
        code=optional_str(data.get("code")),
        address=optional_str(data.get("address")),
    )


def map_parking(data: Any) -> Parking:
    payload = require_mapping(data, "parking")
    status = payload.get("status")
    if not isinstance(status, str) or not status:
        raise ApiError("Response missing parking status.")
    actual_minutes = payload.get("actualMinutes")
    time_remaining = payload.get("timeRemaining")
    return Parking(
        id=coerce_id(payload.get("id"), "parking id"),
        plate=_plate(payload.get("plate"), "parking"),
        status=status,
        start_time=optional_timestamp(payload.get("startTime")) or "",
        expected_end_time=optional_timestamp(payload.get("expectedEndTime")) or "",
        requested_minutes=parse_int(payload.get("requestedMinutes")),
        credits_used=parse_decimal(payload.get("creditsUsed")),
        zone_id=optional_str(payload.get("zoneId")),
        zone=map_zone_ref(payload.get("zone")),
        actual_end_time=optional_timestamp(payload.get("actualEndTime")),
        actual_minutes=parse_int(actual_minutes) if actual_minutes is not None else None,
        time_remaining=parse_int(time_remaining) if time_remaining is not None else None,
    )


def map_plate_lookup(data: Any) -> PlateLookup:
    payload = require_mapping(data, "plate lookup")
    raw_parking = payload.get("parking")
    can_create = payload.get("canCreateNotification")
    return PlateLookup(
        found=payload.get("found") is True,
        parking=map_parking(raw_parking) if isinstance(raw_parking, dict) else None,
        can_create_notification=can_create if isinstance(can_create, bool) else None,
        reason=optional_str(payload.get("reason")),
    )


def map_dashboard_metrics(data: Any) -> DashboardMetrics:
    payload = require_mapping(data, "dashboard metrics")
    return DashboardMetrics(
        active_parkings=parse_int(payload.get("activeParkings")),
        total_revenue_today=parse_decimal(payload.get("totalRevenueToday")),
        active_users=parse_int(payload.get("activeUsers")),
        registered_zones=parse_int(payload.get("registeredZones")),
    )


def map_notification(data: Any) -> Notification:
    payload = require_mapping(data, "notification")
    status = payload.get("status")
    if not isinstance(status, str) or not status:
        raise ApiError("Response missing notification status.")
    return Notification(
        id=coerce_id(payload.get("id"), "notification id"),
        notification_number=coerce_id(payload.get("notificationNumber"), "notification number"),
        plate=_plate(payload.get("plate"), "notification"),
        status=status,
        amount=parse_decimal(payload.get("amount")),
        expires_at=optional_timestamp(payload.get("expiresAt")),
        paid_at=optional_timestamp(payload.get("paidAt")),
        converted_to_fine_at=optional_timestamp(payload.get("convertedToFineAt")),
        location=map_location(payload.get("location")),
        observations=optional_str(payload.get("observations")),
        created_at=optional_timestamp(payload.get("createdAt")),
        updated_at=optional_timestamp(payload.get("updatedAt")),
    )


def map_notification_payment(data: Any) -> NotificationPayment:
    payload = require_mapping(data, "notification payment")
    payment = require_mapping(payload.get("payment"), "payment")
    notification = payload.get("notification")
    if not isinstance(notification, dict):
        notification = {}
    return NotificationPayment(
        payment=PaymentIntent(
            id=coerce_id(payment.get("id"), "payment id"),
            amount=parse_decimal(payment.get("amount")),
            method=str(payment.get("method") or "pix"),
            status=str(payment.get("status") or ""),
            expires_at=optional_timestamp(payment.get("expiresAt")),
            qr_code=optional_str(payment.get("qrCode")),
            qr_code_text=optional_str(payment.get("qrCodeText")),
            provider_transaction_id=optional_str(payment.get("providerTransactionId")),
        ),
        notification_id=str(notification.get("id") or ""),
        notification_number=str(notification.get("notificationNumber") or ""),
        plate=str(notification.get("plate") or ""),
    )


def map_fiscal_payment(data: Any) -> FiscalPayment | None:
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    return FiscalPayment(
        id=coerce_id(data.get("id"), "payment id"),
        status=optional_str(data.get("status")),
        qr_code=optional_str(data.get("qrCode")),
        qr_code_text=optional_str(data.get("qrCodeText")),
        expires_at=optional_timestamp(data.get("expiresAt")),
        created_at=optional_timestamp(data.get("createdAt")),
    )


def map_fiscal_parking(data: Any) -> FiscalParking:
    payload = require_mapping(data, "fiscal parking")
    return FiscalParking(
        id=coerce_id(payload.get("id"), "fiscal parking id"),
        plate=_plate(payload.get("plate"), "fiscal parking"),
        status=str(payload.get("status") or ""),
        requested_minutes=parse_int(payload.get("requestedMinutes")),
        amount=parse_decimal(payload.get("amount")),
        payment_method=str(payload.get("paymentMethod") or ""),
        zone=map_zone_ref(payload.get("zone")),
        start_time=optional_timestamp(payload.get("startTime")),
        expected_end_time=optional_timestamp(payload.get("expectedEndTime")),
        payment=map_fiscal_payment(payload.get("payment")),
        created_at=optional_timestamp(payload.get("createdAt")),
    )


def map_fiscal_statistics(data: Any) -> FiscalStatistics:
    payload = require_mapping(data, "fiscal statistics")
    return FiscalStatistics(
        total_parkings=parse_int(payload.get("totalParkings")),
        total_pix_amount=parse_decimal(payload.get("totalPixAmount")),
        total_cash_amount=parse_decimal(payload.get("totalCashAmount")),
        total_amount=parse_decimal(payload.get("totalAmount")),
        pix_payments_count=parse_int(payload.get("pixPaymentsCount")),
        cash_payments_count=parse_int(payload.get("cashPaymentsCount")),
        pending_pix_payments=parse_int(payload.get("pendingPixPayments")),
    )


def map_person_ref(data: Any) -> PersonRef | None:
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    return PersonRef(
        id=coerce_id(data.get("id"), "person id"),
        name=str(data.get("name") or ""),
        email=optional_str(data.get("email")),
    )


def map_settlement(data: Any) -> FiscalSettlement:
    payload = require_mapping(data, "settlement")
    status = payload.get("status")
    if not isinstance(status, str) or not status:
        raise ApiError("Response missing settlement status.")
    raw_parkings = payload.get("parkings")
    parkings = (
        [map_fiscal_parking(item) for item in raw_parkings if isinstance(item, dict)]
        if isinstance(raw_parkings, list)
        else []
    )
    return FiscalSettlement(
        id=coerce_id(payload.get("id"), "settlement id"),
        fiscal=map_person_ref(payload.get("fiscal")),
        period_start=optional_timestamp(payload.get("periodStart")) or "",
        period_end=optional_timestamp(payload.get("periodEnd")) or "",
        total_parkings=parse_int(payload.get("totalParkings")),
        total_pix_amount=parse_decimal(payload.get("totalPixAmount")),
        total_cash_amount=parse_decimal(payload.get("totalCashAmount")),
        total_amount=parse_decimal(payload.get("totalAmount")),
        pix_payments_count=parse_int(payload.get("pixPaymentsCount")),
        cash_payments_count=parse_int(payload.get("cashPaymentsCount")),
        status=status,
        reviewed_by=map_person_ref(payload.get("reviewedBy")),
        reviewed_at=optional_timestamp(payload.get("reviewedAt")),
        observations=optional_str(payload.get("observations")),
        parkings=parkings,
        created_at=optional_timestamp(payload.get("createdAt")),
        updated_at=optional_timestamp(payload.get("updatedAt")),
    )
