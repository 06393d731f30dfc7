"""Parking endpoints."""

from __future__ import annotations

import logging

from ..const import (
    AVULSO_PARKING_ENDPOINT,
    DASHBOARD_METRICS_ENDPOINT,
    PARKING_BY_PLATE_ENDPOINT,
    PARKING_HISTORY_ENDPOINT,
)
from ..mapping import map_dashboard_metrics, map_page, map_parking, map_plate_lookup
from ..models import DashboardMetrics, Page, Parking, PlateLookup
from ..util import mask_license_plate, normalize_license_plate
from .base import BaseService, cache_key, query_params

_LOGGER = logging.getLogger(__name__)

ACTIVE_PARKINGS_QUERY = "active-parkings"
HISTORY_QUERY = "parking-history"
METRICS_QUERY = "dashboard-metrics"


class ParkingService(BaseService):
    async def lookup_plate(self, plate: str) -> PlateLookup:
        normalized = normalize_license_plate(plate)
        _LOGGER.debug("Plate lookup for %s", mask_license_plate(normalized))
        data = await self._gateway.get(f"{PARKING_BY_PLATE_ENDPOINT}/{normalized}")
        return map_plate_lookup(data)

    async def history(
        self,
        *,
        status: str | None = None,
        vehicle_id: str | None = None,
        zone_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Parking]:
        params = query_params(
            status=status,
            vehicleId=vehicle_id,
            zoneId=zone_id,
            startDate=start_date,
            endDate=end_date,
            page=page,
            limit=limit,
        )

        async def _load() -> Page[Parking]:
            data = await self._gateway.get(PARKING_HISTORY_ENDPOINT, params=params)
            return map_page(data, map_parking, "parkings")

        return await self._cache.fetch(cache_key(HISTORY_QUERY, params), _load)

    async def dashboard_metrics(self) -> DashboardMetrics:
        async def _load() -> DashboardMetrics:
            data = await self._gateway.get(DASHBOARD_METRICS_ENDPOINT)
            return map_dashboard_metrics(data)

        return await self._cache.fetch((METRICS_QUERY,), _load)

    async def create_avulso(self, *, plate: str, zone_id: str, requested_minutes: int) -> Parking:
        """Create a walk-up parking on behalf of a driver."""
        payload = {
            "plate": normalize_license_plate(plate),
            "zoneId": self._require_id(zone_id, "zone_id"),
            "requestedMinutes": requested_minutes,
        }
        data = await self._gateway.post(AVULSO_PARKING_ENDPOINT, payload)
        self._invalidate(
            ACTIVE_PARKINGS_QUERY,
            HISTORY_QUERY,
            METRICS_QUERY,
            "zones",
        )
        return map_parking(data)
