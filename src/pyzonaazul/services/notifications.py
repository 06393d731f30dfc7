"""Notification endpoints."""

from __future__ import annotations

import logging

from ..const import NOTIFICATIONS_ENDPOINT, PUBLIC_NOTIFICATION_ENDPOINT
from ..mapping import location_to_payload, map_notification, map_notification_payment, map_page
from ..models import Location, Notification, NotificationPayment, Page
from ..util import mask_license_plate, normalize_license_plate
from .base import BaseService, cache_key, query_params

_LOGGER = logging.getLogger(__name__)

NOTIFICATIONS_QUERY = "fiscal-notifications"


class NotificationService(BaseService):
    """Public lookup and recognition plus the fiscal listing and issuing."""

    async def get_public(self, notification_number: str) -> Notification:
        """Fetch a notification by its public number, bypassing the cache."""
        number = self._require_id(notification_number, "notification_number")
        data = await self._gateway.get(f"{PUBLIC_NOTIFICATION_ENDPOINT}/{number}")
        return map_notification(data)

    async def recognize(
        self,
        notification_number: str,
        *,
        cpf: str,
        name: str,
        email: str,
        phone: str | None = None,
        address: str | None = None,
    ) -> Notification:
        number = self._require_id(notification_number, "notification_number")
        payload: dict[str, str] = {"cpf": cpf, "name": name, "email": email}
        if phone:
            payload["phone"] = phone
        if address:
            payload["address"] = address
        data = await self._gateway.post(f"{NOTIFICATIONS_ENDPOINT}/{number}/recognize", payload)
        self._invalidate(NOTIFICATIONS_QUERY)
        return map_notification(data)

    async def create_payment(self, notification_id: str) -> NotificationPayment:
        notification_id_value = self._require_id(notification_id, "notification_id")
        data = await self._gateway.post(f"{NOTIFICATIONS_ENDPOINT}/{notification_id_value}/payment")
        return map_notification_payment(data)

    async def list_notifications(
        self,
        *,
        status: str | None = None,
        plate: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Notification]:
        params = query_params(
            status=status,
            plate=normalize_license_plate(plate) if plate else None,
            startDate=start_date,
            endDate=end_date,
            page=page,
            limit=limit,
        )

        async def _load() -> Page[Notification]:
            data = await self._gateway.get(NOTIFICATIONS_ENDPOINT, params=params)
            return map_page(data, map_notification, "notifications")

        return await self._cache.fetch(cache_key(NOTIFICATIONS_QUERY, params), _load)

    async def create_notification(
        self,
        plate: str,
        *,
        location: Location | None = None,
        observations: str | None = None,
    ) -> Notification:
        normalized = normalize_license_plate(plate)
        payload: dict[str, object] = {"plate": normalized}
        location_payload = location_to_payload(location)
        if location_payload:
            payload["location"] = location_payload
        if observations:
            payload["observations"] = observations
        data = await self._gateway.post(NOTIFICATIONS_ENDPOINT, payload)
        self._invalidate(NOTIFICATIONS_QUERY)
        notification = map_notification(data)
        _LOGGER.debug(
            "Notification %s issued for %s",
            notification.notification_number,
            mask_license_plate(normalized),
        )
        return notification
