from decimal import Decimal

import pytest

from pyzonaazul.exceptions import ApiError
from pyzonaazul.mapping import (
    location_to_payload,
    map_login,
    map_notification,
    map_notification_payment,
    map_page,
    map_plate_lookup,
    map_settlement,
    map_user,
    map_user_match,
    map_zone,
    user_to_payload,
)
from pyzonaazul.models import Location


def _zone_payload(**overrides):
    payload = {
        "id": "zone-1",
        "code": "Z01",
        "name": "Centro",
        "address": "Rua A, 100",
        "pricePerPeriod": "2.50",
        "periodMinutes": 30,
        "maxTimeMinutes": 120,
        "totalSpots": 40,
        "occupiedSpots": 12,
        "status": "active",
    }
    payload.update(overrides)
    return payload


def test_map_user_round_trip_through_payload() -> None:
    user = map_user(
        {
            "id": 7,
            "email": "fiscal@example.com",
            "name": "Fiscal",
            "role": "fiscal",
            "phone": "11999990000",
            "emailVerified": True,
            "createdAt": "2024-01-01T12:00:00.000Z",
        }
    )
    assert user.id == "7"
    assert user.role == "fiscal"
    assert user.email_verified is True
    assert user.phone_verified is False
    assert user.is_active is True
    assert user.created_at == "2024-01-01T12:00:00Z"
    assert map_user(user_to_payload(user)) == user


def test_map_user_requires_role() -> None:
    with pytest.raises(ApiError):
        map_user({"id": "1", "email": "a@b.c"})


def test_map_login() -> None:
    result = map_login(
        {
            "token": "access",
            "refreshToken": "refresh",
            "expiresIn": 3600,
            "user": {"id": "1", "email": "a@b.c", "name": "Admin", "role": "admin"},
        }
    )
    assert result.token == "access"
    assert result.refresh_token == "refresh"
    assert result.expires_in == 3600
    assert result.user.role == "admin"


def test_map_login_requires_token() -> None:
    with pytest.raises(ApiError):
        map_login({"user": {"id": "1", "role": "admin"}})


def test_map_user_match() -> None:
    assert map_user_match({"found": False}) is None
    match = map_user_match(
        {"found": True, "user": {"id": "u1", "name": "Ana", "email": "ana@example.com"}}
    )
    assert match is not None
    assert match.name == "Ana"
    assert match.phone is None


def test_map_zone_parses_numbers() -> None:
    zone = map_zone(_zone_payload())
    assert zone.price_per_period == Decimal("2.50")
    assert zone.period_minutes == 30
    assert zone.available_spots == 28


def test_map_page_with_pagination() -> None:
    page = map_page(
        {
            "data": [_zone_payload(), _zone_payload(id="zone-2", code="Z02")],
            "pagination": {"page": 2, "limit": 2, "total": 5, "totalPages": 3},
        },
        map_zone,
        "zones",
    )
    assert [zone.id for zone in page.items] == ["zone-1", "zone-2"]
    assert page.pagination.page == 2
    assert page.pagination.total_pages == 3


def test_map_page_without_pagination() -> None:
    page = map_page({"data": [_zone_payload()]}, map_zone, "zones")
    assert page.pagination.total == 1
    assert page.pagination.total_pages == 1


def test_map_page_rejects_non_list() -> None:
    with pytest.raises(ApiError):
        map_page({"data": "nope"}, map_zone, "zones")


def test_map_notification() -> None:
    notification = map_notification(
        {
            "id": "n1",
            "notificationNumber": "00000007",
            "plate": "abc-1234",
            "status": "pending",
            "amount": "5.00",
            "expiresAt": "2024-05-01T10:00:00.000Z",
            "location": {"address": "Rua B", "latitude": "-23.5"},
        }
    )
    assert notification.plate == "ABC1234"
    assert notification.amount == Decimal("5.00")
    assert notification.expires_at == "2024-05-01T10:00:00Z"
    assert notification.location == Location(latitude=-23.5, longitude=None, address="Rua B")


def test_map_notification_requires_status() -> None:
    with pytest.raises(ApiError):
        map_notification({"id": "n1", "notificationNumber": "1", "plate": "ABC1234"})


def test_map_notification_payment() -> None:
    payment = map_notification_payment(
        {
            "payment": {"id": "p1", "amount": 5, "method": "pix", "status": "pending"},
            "notification": {"id": "n1", "notificationNumber": "00000007", "plate": "ABC1234"},
        }
    )
    assert payment.payment.id == "p1"
    assert payment.payment.amount == Decimal("5")
    assert payment.notification_number == "00000007"


def test_map_plate_lookup_not_found() -> None:
    lookup = map_plate_lookup({"found": False})
    assert lookup.found is False
    assert lookup.parking is None
    assert lookup.can_create_notification is None


def test_map_settlement_with_parkings() -> None:
    settlement = map_settlement(
        {
            "id": "s1",
            "fiscal": {"id": "f1", "name": "Fiscal"},
            "periodStart": "2024-01-01T00:00:00.000Z",
            "periodEnd": "2024-01-07T23:59:59.000Z",
            "totalParkings": 2,
            "totalPixAmount": "10.00",
            "totalCashAmount": "5.00",
            "totalAmount": "15.00",
            "pixPaymentsCount": 1,
            "cashPaymentsCount": 1,
            "status": "pending",
            "parkings": [
                {
                    "id": "fp1",
                    "plate": "ABC1234",
                    "status": "active",
                    "requestedMinutes": 60,
                    "amount": "5.00",
                    "paymentMethod": "cash",
                    "zone": {"id": "zone-1", "name": "Centro"},
                }
            ],
        }
    )
    assert settlement.fiscal is not None
    assert settlement.fiscal.name == "Fiscal"
    assert settlement.total_amount == Decimal("15.00")
    assert settlement.parkings[0].payment_method == "cash"
    assert settlement.parkings[0].zone is not None
    assert settlement.reviewed_by is None


def test_location_to_payload_drops_empty_fields() -> None:
    assert location_to_payload(None) is None
    assert location_to_payload(Location()) is None
    assert location_to_payload(Location(address="Rua C")) == {"address": "Rua C"}
