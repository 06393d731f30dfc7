"""Zone endpoints."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from ..const import ZONES_ENDPOINT
from ..exceptions import ValidationError
from ..mapping import map_page, map_zone
from ..models import Page, Zone
from .base import BaseService, cache_key, query_params

_LOGGER = logging.getLogger(__name__)

ZONES_QUERY = "zones"

_UPDATABLE_FIELDS = {
    "name": "name",
    "address": "address",
    "latitude": "latitude",
    "longitude": "longitude",
    "price_per_period": "pricePerPeriod",
    "period_minutes": "periodMinutes",
    "max_time_minutes": "maxTimeMinutes",
    "total_spots": "totalSpots",
    "status": "status",
    "operating_hours": "operatingHours",
}


def _json_value(value: Any) -> Any:
    # The API takes numbers; Decimal is not JSON serializable.
    if isinstance(value, Decimal):
        return float(value)
    return value


class ZoneService(BaseService):
    """Zones are listed through the query cache; mutations invalidate it."""

    async def list_zones(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Zone]:
        params = query_params(
            status=status,
            search=search,
            latitude=latitude,
            longitude=longitude,
            page=page,
            limit=limit,
        )

        async def _load() -> Page[Zone]:
            data = await self._gateway.get(ZONES_ENDPOINT, params=params)
            return map_page(data, map_zone, "zones")

        return await self._cache.fetch(cache_key(ZONES_QUERY, params), _load)

    async def get_zone(self, zone_id: str) -> Zone:
        zone_id_value = self._require_id(zone_id, "zone_id")
        data = await self._gateway.get(f"{ZONES_ENDPOINT}/{zone_id_value}")
        return map_zone(data)

    async def create_zone(
        self,
        *,
        code: str,
        name: str,
        address: str,
        price_per_period: Decimal | float,
        period_minutes: int,
        max_time_minutes: int,
        total_spots: int,
        latitude: float | None = None,
        longitude: float | None = None,
        operating_hours: Any | None = None,
    ) -> Zone:
        payload: dict[str, Any] = {
            "code": code,
            "name": name,
            "address": address,
            "pricePerPeriod": _json_value(price_per_period),
            "periodMinutes": period_minutes,
            "maxTimeMinutes": max_time_minutes,
            "totalSpots": total_spots,
        }
        if latitude is not None:
            payload["latitude"] = latitude
        if longitude is not None:
            payload["longitude"] = longitude
        if operating_hours is not None:
            payload["operatingHours"] = operating_hours
        data = await self._gateway.post(ZONES_ENDPOINT, payload)
        self._invalidate(ZONES_QUERY)
        _LOGGER.debug("Zone %s created", code)
        return map_zone(data)

    async def update_zone(self, zone_id: str, **changes: Any) -> Zone:
        zone_id_value = self._require_id(zone_id, "zone_id")
        unknown = sorted(set(changes) - set(_UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Unsupported zone fields: {', '.join(unknown)}.")
        payload = {
            _UPDATABLE_FIELDS[key]: _json_value(value)
            for key, value in changes.items()
            if value is not None
        }
        if not payload:
            raise ValidationError("At least one zone field is required.")
        data = await self._gateway.put(f"{ZONES_ENDPOINT}/{zone_id_value}", payload)
        self._invalidate(ZONES_QUERY)
        return map_zone(data)

    async def delete_zone(self, zone_id: str) -> None:
        zone_id_value = self._require_id(zone_id, "zone_id")
        await self._gateway.delete(f"{ZONES_ENDPOINT}/{zone_id_value}")
        self._invalidate(ZONES_QUERY)
