"""Public data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

Role = Literal["admin", "fiscal", "operator", "driver"]
ZoneStatus = Literal["active", "inactive"]
ParkingStatus = Literal["active", "expiring", "expired", "completed", "cancelled"]
NotificationStatus = Literal["pending", "recognized", "paid", "expired", "converted"]
SettlementStatus = Literal["pending", "reviewed", "approved", "rejected"]
ReviewDecision = Literal["approved", "rejected"]
PaymentMethod = Literal["pix", "cash"]


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    pagination: Pagination


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    name: str
    role: str
    phone: str | None = None
    avatar: str | None = None
    email_verified: bool = False
    phone_verified: bool = False
    is_active: bool = True
    last_login_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    refresh_token: str
    user: User
    expires_in: int | None = None


@dataclass(frozen=True, slots=True)
class UserMatch:
    """Profile returned by the CPF lookup, used to prefill forms."""

    id: str
    name: str
    email: str
    phone: str | None = None
    cpf: str | None = None


@dataclass(frozen=True, slots=True)
class Location:
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None


@dataclass(frozen=True, slots=True)
class Zone:
    id: str
    code: str
    name: str
    address: str
    price_per_period: Decimal
    period_minutes: int
    max_time_minutes: int
    total_spots: int
    occupied_spots: int
    status: str
    latitude: str | None = None
    longitude: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def available_spots(self) -> int:
        return max(0, self.total_spots - self.occupied_spots)


@dataclass(frozen=True, slots=True)
class ZoneRef:
    id: str
    name: str
    code: str | None = None
    address: str | None = None


@dataclass(frozen=True, slots=True)
class Parking:
    id: str
    plate: str
    status: str
    start_time: str
    expected_end_time: str
    requested_minutes: int
    credits_used: Decimal
    zone_id: str | None = None
    zone: ZoneRef | None = None
    actual_end_time: str | None = None
    actual_minutes: int | None = None
    time_remaining: int | None = None


@dataclass(frozen=True, slots=True)
class PlateLookup:
    found: bool
    parking: Parking | None
    can_create_notification: bool | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    active_parkings: int
    total_revenue_today: Decimal
    active_users: int
    registered_zones: int


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    notification_number: str
    plate: str
    status: str
    amount: Decimal
    expires_at: str | None = None
    paid_at: str | None = None
    converted_to_fine_at: str | None = None
    location: Location | None = None
    observations: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    id: str
    amount: Decimal
    method: str
    status: str
    expires_at: str | None = None
    qr_code: str | None = None
    qr_code_text: str | None = None
    provider_transaction_id: str | None = None


@dataclass(frozen=True, slots=True)
class NotificationPayment:
    payment: PaymentIntent
    notification_id: str
    notification_number: str
    plate: str


@dataclass(frozen=True, slots=True)
class FiscalPayment:
    id: str
    status: str | None = None
    qr_code: str | None = None
    qr_code_text: str | None = None
    expires_at: str | None = None
    created_at: str | None = None


@dataclass(frozen=True, slots=True)
class FiscalParking:
    id: str
    plate: str
    status: str
    requested_minutes: int
    amount: Decimal
    payment_method: str
    zone: ZoneRef | None = None
    start_time: str | None = None
    expected_end_time: str | None = None
    payment: FiscalPayment | None = None
    created_at: str | None = None


@dataclass(frozen=True, slots=True)
class FiscalStatistics:
    total_parkings: int
    total_pix_amount: Decimal
    total_cash_amount: Decimal
    total_amount: Decimal
    pix_payments_count: int
    cash_payments_count: int
    pending_pix_payments: int


@dataclass(frozen=True, slots=True)
class PersonRef:
    id: str
    name: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class FiscalSettlement:
    id: str
    fiscal: PersonRef | None
    period_start: str
    period_end: str
    total_parkings: int
    total_pix_amount: Decimal
    total_cash_amount: Decimal
    total_amount: Decimal
    pix_payments_count: int
    cash_payments_count: int
    status: str
    reviewed_by: PersonRef | None = None
    reviewed_at: str | None = None
    observations: str | None = None
    parkings: list[FiscalParking] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
