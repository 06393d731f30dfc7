"""Admin review of fiscal cash/PIX settlements."""

from __future__ import annotations

import logging

from ..access import Access, Capability, require_capability
from ..const import DEFAULT_PAGE_LIMIT
from ..exceptions import ValidationError, WorkflowStateError
from ..models import FiscalSettlement, Page
from ..services.fiscal_settlements import REVIEW_DECISIONS, FiscalSettlementService

_LOGGER = logging.getLogger(__name__)

SETTLEMENT_STATUS_LABELS = {
    "pending": "Pendente",
    "reviewed": "Revisada",
    "approved": "Aprovada",
    "rejected": "Rejeitada",
}


class SettlementReview:
    """Pending list, detail view and a whole-settlement decision."""

    def __init__(self, settlements: FiscalSettlementService, access: Access | None) -> None:
        self._access = require_capability(access, Capability.REVIEW_SETTLEMENTS)
        self._settlements = settlements
        self._selected: FiscalSettlement | None = None

    @property
    def selected(self) -> FiscalSettlement | None:
        return self._selected

    async def pending(
        self,
        *,
        fiscal_id: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[FiscalSettlement]:
        return await self._settlements.pending(fiscal_id=fiscal_id, page=page, limit=limit)

    async def select(self, settlement_id: str) -> FiscalSettlement:
        self._selected = await self._settlements.get(settlement_id)
        return self._selected

    def close_detail(self) -> None:
        self._selected = None

    async def submit(self, decision: str, observations: str | None = None) -> None:
        """Send the decision; the settlement is re-read from the server afterwards."""
        if decision not in REVIEW_DECISIONS:
            raise ValidationError(
                "decision must be approved or rejected.",
                user_message="Selecione aprovar ou rejeitar",
            )
        if self._selected is None:
            raise WorkflowStateError("No settlement is selected.")
        settlement_id = self._selected.id
        await self._settlements.review(
            settlement_id,
            status=decision,
            observations=observations,
        )
        _LOGGER.debug(
            "Settlement %s %s by %s",
            settlement_id,
            decision,
            self._access.user.id,
        )
        self.close_detail()
