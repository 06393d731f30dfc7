"""Fiscal settlement endpoints."""

from __future__ import annotations

import logging
from typing import Any

from ..const import (
    DEFAULT_PAGE_LIMIT,
    FISCAL_SETTLEMENTS_ENDPOINT,
    GENERATE_SETTLEMENT_ENDPOINT,
    PENDING_SETTLEMENTS_ENDPOINT,
)
from ..exceptions import ValidationError
from ..mapping import map_page, map_settlement
from ..models import FiscalSettlement, Page
from .base import BaseService, cache_key, query_params

_LOGGER = logging.getLogger(__name__)

SETTLEMENTS_QUERY = "fiscal-settlements"
SETTLEMENT_DETAIL_QUERY = "fiscal-settlement-details"
PENDING_SETTLEMENTS_QUERY = "admin-pending-settlements"
REVIEW_DECISIONS = ("approved", "rejected")


class FiscalSettlementService(BaseService):
    async def generate(
        self,
        *,
        fiscal_id: str | None = None,
        period_days: int | None = None,
    ) -> FiscalSettlement:
        payload: dict[str, Any] = {}
        if fiscal_id:
            payload["fiscalId"] = fiscal_id
        if period_days is not None:
            if period_days <= 0:
                raise ValidationError("period_days must be positive.")
            payload["periodDays"] = period_days
        data = await self._gateway.post(GENERATE_SETTLEMENT_ENDPOINT, payload)
        self._invalidate(SETTLEMENTS_QUERY, PENDING_SETTLEMENTS_QUERY)
        return map_settlement(data)

    async def list(
        self,
        *,
        status: str | None = None,
        fiscal_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[FiscalSettlement]:
        params = query_params(
            status=status,
            fiscalId=fiscal_id,
            startDate=start_date,
            endDate=end_date,
            page=page,
            limit=limit,
        )

        async def _load() -> Page[FiscalSettlement]:
            data = await self._gateway.get(FISCAL_SETTLEMENTS_ENDPOINT, params=params)
            return map_page(data, map_settlement, "settlements")

        return await self._cache.fetch(cache_key(SETTLEMENTS_QUERY, params), _load)

    async def get(self, settlement_id: str) -> FiscalSettlement:
        settlement_id_value = self._require_id(settlement_id, "settlement_id")

        async def _load() -> FiscalSettlement:
            data = await self._gateway.get(f"{FISCAL_SETTLEMENTS_ENDPOINT}/{settlement_id_value}")
            return map_settlement(data)

        return await self._cache.fetch((SETTLEMENT_DETAIL_QUERY, settlement_id_value), _load)

    async def pending(
        self,
        *,
        fiscal_id: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[FiscalSettlement]:
        params = query_params(fiscalId=fiscal_id, page=page, limit=limit)

        async def _load() -> Page[FiscalSettlement]:
            data = await self._gateway.get(PENDING_SETTLEMENTS_ENDPOINT, params=params)
            return map_page(data, map_settlement, "settlements")

        return await self._cache.fetch(cache_key(PENDING_SETTLEMENTS_QUERY, params), _load)

    async def review(
        self,
        settlement_id: str,
        *,
        status: str,
        observations: str | None = None,
    ) -> FiscalSettlement:
        settlement_id_value = self._require_id(settlement_id, "settlement_id")
        if status not in REVIEW_DECISIONS:
            raise ValidationError(
                "Review status must be approved or rejected.",
                user_message="Selecione aprovar ou rejeitar",
            )
        payload: dict[str, str] = {"status": status}
        if observations and observations.strip():
            payload["observations"] = observations.strip()
        data = await self._gateway.post(
            f"{FISCAL_SETTLEMENTS_ENDPOINT}/{settlement_id_value}/review",
            payload,
        )
        self._invalidate(PENDING_SETTLEMENTS_QUERY, SETTLEMENTS_QUERY, SETTLEMENT_DETAIL_QUERY)
        _LOGGER.debug("Settlement %s reviewed as %s", settlement_id_value, status)
        return map_settlement(data)
