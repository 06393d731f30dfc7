"""Field agent workflow: plate checks, notifications and walk-up parkings."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal

from ..access import Access, Capability, require_capability
from ..exceptions import ValidationError
from ..models import (
    FiscalParking,
    FiscalSettlement,
    FiscalStatistics,
    Location,
    Notification,
    Page,
    Parking,
    PlateLookup,
    Zone,
)
from ..services.fiscal_parkings import PAYMENT_METHODS, FiscalParkingService
from ..services.fiscal_settlements import FiscalSettlementService
from ..services.notifications import NotificationService
from ..services.parkings import ParkingService
from ..services.zones import ZoneService
from ..util import mask_license_plate, normalize_license_plate

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlateCheck:
    plate: str
    lookup: PlateLookup

    @property
    def irregular(self) -> bool:
        """No paid parking was found for the plate."""
        return not (self.lookup.found and self.lookup.parking is not None)

    @property
    def can_create_notification(self) -> bool:
        if not self.lookup.found:
            return True
        return self.lookup.can_create_notification is True and self.lookup.parking is not None


def estimate_amount(zone: Zone, requested_minutes: int) -> Decimal:
    """Price charged for ``requested_minutes``: whole periods, rounded up."""
    if zone.period_minutes <= 0:
        return Decimal("0")
    periods = math.ceil(requested_minutes / zone.period_minutes)
    return zone.price_per_period * periods


def validate_requested_minutes(zone: Zone, requested_minutes: int) -> int:
    if isinstance(requested_minutes, bool) or not isinstance(requested_minutes, int):
        raise ValidationError("requested_minutes must be an integer.")
    if requested_minutes < zone.period_minutes:
        raise ValidationError(
            "requested_minutes is below the zone period.",
            user_message=f"Tempo mínimo é {zone.period_minutes} minutos",
        )
    if requested_minutes > zone.max_time_minutes:
        raise ValidationError(
            "requested_minutes exceeds the zone maximum.",
            user_message=f"Tempo máximo é {zone.max_time_minutes} minutos",
        )
    return requested_minutes


def _require_plate(plate: str | None) -> str:
    if not plate or not plate.strip():
        raise ValidationError("plate is required.", user_message="Por favor, informe uma placa")
    return normalize_license_plate(plate)


class FiscalDesk:
    """Actions available to fiscal agents (and admins) in the field."""

    def __init__(
        self,
        *,
        parkings: ParkingService,
        zones: ZoneService,
        notifications: NotificationService,
        fiscal_parkings: FiscalParkingService,
        settlements: FiscalSettlementService,
        access: Access | None,
    ) -> None:
        self._access = require_capability(access, Capability.ISSUE_NOTIFICATIONS)
        self._parkings = parkings
        self._zones = zones
        self._notifications = notifications
        self._fiscal_parkings = fiscal_parkings
        self._settlements = settlements

    async def check_plate(self, plate: str) -> PlateCheck:
        normalized = _require_plate(plate)
        lookup = await self._parkings.lookup_plate(normalized)
        return PlateCheck(plate=normalized, lookup=lookup)

    async def issue_notification(
        self,
        plate: str,
        *,
        address: str | None = None,
        observations: str | None = None,
    ) -> Notification:
        normalized = _require_plate(plate)
        location = Location(address=address.strip()) if address and address.strip() else None
        notification = await self._notifications.create_notification(
            normalized,
            location=location,
            observations=(observations or "").strip() or None,
        )
        _LOGGER.debug(
            "Fiscal %s issued notification for %s",
            self._access.user.id,
            mask_license_plate(normalized),
        )
        return notification

    async def active_zones(self) -> list[Zone]:
        page = await self._zones.list_zones(status="active")
        return page.items

    async def create_avulso_parking(
        self,
        *,
        zone: Zone | str,
        plate: str,
        requested_minutes: int,
    ) -> Parking:
        resolved = await self._resolve_zone(zone)
        normalized = _require_plate(plate)
        validate_requested_minutes(resolved, requested_minutes)
        return await self._parkings.create_avulso(
            plate=normalized,
            zone_id=resolved.id,
            requested_minutes=requested_minutes,
        )

    async def create_fiscal_parking(
        self,
        *,
        zone: Zone | str,
        plate: str,
        requested_minutes: int,
        payment_method: str,
        location: Location | None = None,
        observations: str | None = None,
    ) -> FiscalParking:
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                "payment_method must be pix or cash.",
                user_message="Selecione a forma de pagamento",
            )
        resolved = await self._resolve_zone(zone)
        normalized = _require_plate(plate)
        validate_requested_minutes(resolved, requested_minutes)
        return await self._fiscal_parkings.create(
            zone_id=resolved.id,
            plate=normalized,
            requested_minutes=requested_minutes,
            payment_method=payment_method,
            location=location,
            observations=observations,
        )

    async def statistics(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FiscalStatistics:
        return await self._fiscal_parkings.statistics(start_date=start_date, end_date=end_date)

    async def recent_notifications(self, limit: int = 5) -> list[Notification]:
        page = await self._notifications.list_notifications(page=1, limit=limit)
        return page.items

    async def fiscal_parkings(
        self,
        *,
        status: str | None = None,
        plate: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[FiscalParking]:
        return await self._fiscal_parkings.list(status=status, plate=plate, page=page, limit=limit)

    async def settlements(
        self,
        *,
        status: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[FiscalSettlement]:
        return await self._settlements.list(status=status, page=page, limit=limit)

    async def settlement(self, settlement_id: str) -> FiscalSettlement:
        return await self._settlements.get(settlement_id)

    async def generate_settlement(self, period_days: int | None = None) -> FiscalSettlement:
        require_capability(self._access, Capability.GENERATE_SETTLEMENTS)
        return await self._settlements.generate(period_days=period_days)

    async def _resolve_zone(self, zone: Zone | str) -> Zone:
        if isinstance(zone, Zone):
            return zone
        zone_id = (zone or "").strip()
        if not zone_id:
            raise ValidationError("zone_id is required.", user_message="Selecione uma zona")
        for candidate in await self.active_zones():
            if candidate.id == zone_id:
                return candidate
        raise ValidationError("zone_id is not an active zone.", user_message="Selecione uma zona")
