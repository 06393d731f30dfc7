"""User-facing workflows built on the services."""

from .admin import AdminConsole
from .fiscal import FiscalDesk, PlateCheck, estimate_amount
from .notification import NotificationScreen, NotificationWorkflow
from .settlement_review import SettlementReview

__all__ = [
    "AdminConsole",
    "FiscalDesk",
    "NotificationScreen",
    "NotificationWorkflow",
    "PlateCheck",
    "SettlementReview",
    "estimate_amount",
]
