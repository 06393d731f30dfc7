"""Thin wrappers around the REST resources."""

from .auth import AuthService
from .base import BaseService
from .fiscal_parkings import FiscalParkingService
from .fiscal_settlements import FiscalSettlementService
from .notifications import NotificationService
from .parkings import ParkingService
from .users import UserService
from .zones import ZoneService

__all__ = [
    "AuthService",
    "BaseService",
    "FiscalParkingService",
    "FiscalSettlementService",
    "NotificationService",
    "ParkingService",
    "UserService",
    "ZoneService",
]
