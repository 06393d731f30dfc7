"""Administrator console: zones, dashboard, history and fiscal accounts."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from ..access import Access, Capability, require_capability
from ..exceptions import ValidationError
from ..models import DashboardMetrics, Page, Parking, PlateLookup, User, Zone
from ..services.parkings import ParkingService
from ..services.users import UserService
from ..services.zones import ZoneService
from ..util import normalize_cpf, normalize_license_plate, strip_digits, validate_email

MIN_FISCAL_PASSWORD_LENGTH = 8
ZONE_STATUSES = ("active", "inactive")


def _price(value: Decimal | float | int | str) -> Decimal:
    try:
        price = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as exc:
        raise ValidationError(
            "price_per_period must be a number.",
            user_message="Informe um valor válido",
        ) from exc
    if price <= 0:
        raise ValidationError(
            "price_per_period must be positive.",
            user_message="Informe um valor válido",
        )
    return price


def _positive(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer.")
    return value


class AdminConsole:
    """Admin-only screens, gated once at construction."""

    def __init__(
        self,
        *,
        zones: ZoneService,
        parkings: ParkingService,
        users: UserService,
        access: Access | None,
    ) -> None:
        self._access = require_capability(access, Capability.MANAGE_ZONES)
        self._zones = zones
        self._parkings = parkings
        self._users = users

    async def zones(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Zone]:
        return await self._zones.list_zones(status=status, search=search, page=page, limit=limit)

    async def create_zone(
        self,
        *,
        code: str,
        name: str,
        price_per_period: Decimal | float | int | str,
        period_minutes: int,
        max_time_minutes: int,
        total_spots: int,
        address: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> Zone:
        code_value = (code or "").strip()
        name_value = (name or "").strip()
        if not code_value or not name_value or price_per_period in (None, ""):
            raise ValidationError(
                "code, name and price_per_period are required.",
                user_message="Preencha todos os campos obrigatórios",
            )
        price = _price(price_per_period)
        period = _positive(period_minutes, "period_minutes")
        max_time = _positive(max_time_minutes, "max_time_minutes")
        spots = _positive(total_spots, "total_spots")
        if max_time < period:
            raise ValidationError(
                "max_time_minutes must not be shorter than period_minutes.",
                user_message=f"Tempo máximo deve ser de pelo menos {period} minutos",
            )
        return await self._zones.create_zone(
            code=code_value,
            name=name_value,
            address=(address or "").strip(),
            price_per_period=price,
            period_minutes=period,
            max_time_minutes=max_time,
            total_spots=spots,
            latitude=latitude,
            longitude=longitude,
        )

    async def update_zone(self, zone_id: str, **changes: Any) -> Zone:
        if "price_per_period" in changes and changes["price_per_period"] is not None:
            changes["price_per_period"] = _price(changes["price_per_period"])
        for field in ("period_minutes", "max_time_minutes", "total_spots"):
            if changes.get(field) is not None:
                _positive(changes[field], field)
        if changes.get("status") is not None and changes["status"] not in ZONE_STATUSES:
            raise ValidationError("status must be active or inactive.")
        return await self._zones.update_zone(zone_id, **changes)

    async def set_zone_status(self, zone_id: str, status: str) -> Zone:
        return await self.update_zone(zone_id, status=status)

    async def toggle_zone_status(self, zone: Zone) -> Zone:
        new_status = "inactive" if zone.status == "active" else "active"
        return await self.set_zone_status(zone.id, new_status)

    async def delete_zone(self, zone_id: str) -> None:
        await self._zones.delete_zone(zone_id)

    async def dashboard(self) -> DashboardMetrics:
        require_capability(self._access, Capability.VIEW_DASHBOARD)
        return await self._parkings.dashboard_metrics()

    async def history(
        self,
        *,
        status: str | None = None,
        zone_id: str | None = None,
        date: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Parking]:
        """Parking history; ``date`` (YYYY-MM-DD) limits results to that day."""
        require_capability(self._access, Capability.VIEW_HISTORY)
        start_date = end_date = None
        if date:
            start_date = f"{date}T00:00:00.000Z"
            end_date = f"{date}T23:59:59.999Z"
        return await self._parkings.history(
            status=None if status in (None, "all") else status,
            zone_id=None if zone_id in (None, "all") else zone_id,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )

    async def lookup_plate(self, plate: str) -> PlateLookup:
        require_capability(self._access, Capability.LOOKUP_PLATES)
        return await self._parkings.lookup_plate(normalize_license_plate(plate))

    async def create_fiscal(
        self,
        *,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        cpf: str | None = None,
        phone: str | None = None,
    ) -> User:
        require_capability(self._access, Capability.CREATE_FISCALS)
        name_value = (name or "").strip()
        if len(name_value) < 2:
            raise ValidationError(
                "name must have at least 2 characters.",
                user_message="Nome deve ter no mínimo 2 caracteres",
            )
        email_value = validate_email(email)
        cpf_value = normalize_cpf(cpf) if cpf else None
        if not password or len(password) < MIN_FISCAL_PASSWORD_LENGTH:
            raise ValidationError(
                "password must have at least 8 characters.",
                user_message="Senha deve ter no mínimo 8 caracteres",
            )
        if password != confirm_password:
            raise ValidationError(
                "password confirmation does not match.",
                user_message="As senhas não coincidem",
            )
        return await self._users.create_fiscal(
            name=name_value,
            email=email_value,
            password=password,
            cpf=cpf_value,
            phone=strip_digits(phone) or None,
        )
