"""Fiscal (on-the-spot) parking endpoints."""

from __future__ import annotations

from typing import Any

from ..const import FISCAL_PARKINGS_ENDPOINT, FISCAL_STATISTICS_ENDPOINT
from ..exceptions import ValidationError
from ..mapping import location_to_payload, map_fiscal_parking, map_fiscal_statistics, map_page
from ..models import FiscalParking, FiscalStatistics, Location, Page
from ..util import normalize_license_plate
from .base import BaseService, cache_key, query_params

FISCAL_PARKINGS_QUERY = "fiscal-parkings"
FISCAL_STATISTICS_QUERY = "fiscal-statistics"
PAYMENT_METHODS = ("pix", "cash")


class FiscalParkingService(BaseService):
    async def create(
        self,
        *,
        zone_id: str,
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
        payload: dict[str, Any] = {
            "zoneId": self._require_id(zone_id, "zone_id"),
            "plate": normalize_license_plate(plate),
            "requestedMinutes": requested_minutes,
            "paymentMethod": payment_method,
        }
        location_payload = location_to_payload(location)
        if location_payload:
            payload["location"] = location_payload
        if observations:
            payload["observations"] = observations
        data = await self._gateway.post(FISCAL_PARKINGS_ENDPOINT, payload)
        self._invalidate(
            FISCAL_PARKINGS_QUERY,
            FISCAL_STATISTICS_QUERY,
            "active-parkings",
        )
        return map_fiscal_parking(data)

    async def list(
        self,
        *,
        status: str | None = None,
        plate: str | None = None,
        zone_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[FiscalParking]:
        params = query_params(
            status=status,
            plate=normalize_license_plate(plate) if plate else None,
            zoneId=zone_id,
            startDate=start_date,
            endDate=end_date,
            page=page,
            limit=limit,
        )

        async def _load() -> Page[FiscalParking]:
            data = await self._gateway.get(FISCAL_PARKINGS_ENDPOINT, params=params)
            return map_page(data, map_fiscal_parking, "fiscal parkings")

        return await self._cache.fetch(cache_key(FISCAL_PARKINGS_QUERY, params), _load)

    async def get(self, fiscal_parking_id: str) -> FiscalParking:
        parking_id = self._require_id(fiscal_parking_id, "fiscal_parking_id")
        data = await self._gateway.get(f"{FISCAL_PARKINGS_ENDPOINT}/{parking_id}")
        return map_fiscal_parking(data)

    async def statistics(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FiscalStatistics:
        params = query_params(startDate=start_date, endDate=end_date)

        async def _load() -> FiscalStatistics:
            data = await self._gateway.get(FISCAL_STATISTICS_ENDPOINT, params=params)
            return map_fiscal_statistics(data)

        return await self._cache.fetch(cache_key(FISCAL_STATISTICS_QUERY, params), _load)
