"""Client facade wiring the gateway, session, services and workflows."""

from __future__ import annotations

import aiohttp

from .cache import QueryCache
from .config import ClientConfig
from .gateway import ApiGateway
from .models import User
from .navigation import Navigator
from .services.auth import AuthService
from .services.fiscal_parkings import FiscalParkingService
from .services.fiscal_settlements import FiscalSettlementService
from .services.notifications import NotificationService
from .services.parkings import ParkingService
from .services.users import UserService
from .services.zones import ZoneService
from .session import SessionManager
from .storage import JsonFileStorage, KeyValueStorage, SessionStore
from .workflows.admin import AdminConsole
from .workflows.fiscal import FiscalDesk
from .workflows.notification import NotificationWorkflow
from .workflows.settlement_review import SettlementReview


class Client:
    """Entry point for the Zona Azul API."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        config: ClientConfig | None = None,
        base_url: str | None = None,
        storage: KeyValueStorage | None = None,
        navigator: Navigator | None = None,
    ) -> None:
        self._config = config or ClientConfig.from_env()
        if storage is None and self._config.storage_path:
            storage = JsonFileStorage(self._config.storage_path)
        self.store = SessionStore(storage)
        self.gateway = ApiGateway(
            session,
            self.store,
            navigator,
            base_url=base_url or self._config.base_url,
            api_uri=self._config.api_uri,
            timeout=aiohttp.ClientTimeout(total=self._config.timeout),
            retry_count=self._config.retry_count,
            redirect_delay=self._config.redirect_delay,
        )
        self.cache = QueryCache(
            retry=self._config.query_retry,
            stale_time=self._config.query_stale_time,
        )
        self.auth = AuthService(self.gateway, self.cache)
        self.users = UserService(self.gateway, self.cache)
        self.zones = ZoneService(self.gateway, self.cache)
        self.parkings = ParkingService(self.gateway, self.cache)
        self.notifications = NotificationService(self.gateway, self.cache)
        self.fiscal_parkings = FiscalParkingService(self.gateway, self.cache)
        self.settlements = FiscalSettlementService(self.gateway, self.cache)
        self.session = SessionManager(self.auth, self.users, self.store)
        self.gateway.add_unauthorized_listener(self._signed_out)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.gateway.aclose()

    async def login(self, email: str, password: str) -> User:
        user = await self.session.login(email, password)
        # Cached queries belong to the previous identity.
        self.cache.clear()
        return user

    async def logout(self) -> None:
        await self.session.logout()
        self.cache.clear()

    def _signed_out(self) -> None:
        self.session.forget()
        self.cache.clear()

    def notification_workflow(
        self,
        notification_number: str,
        *,
        auto_pay: bool = True,
    ) -> NotificationWorkflow:
        return NotificationWorkflow(
            self.notifications,
            self.users,
            notification_number,
            poll_interval=self._config.poll_interval,
            auto_pay=auto_pay,
        )

    def settlement_review(self) -> SettlementReview:
        return SettlementReview(self.settlements, self.session.access)

    def fiscal_desk(self) -> FiscalDesk:
        return FiscalDesk(
            parkings=self.parkings,
            zones=self.zones,
            notifications=self.notifications,
            fiscal_parkings=self.fiscal_parkings,
            settlements=self.settlements,
            access=self.session.access,
        )

    def admin_console(self) -> AdminConsole:
        return AdminConsole(
            zones=self.zones,
            parkings=self.parkings,
            users=self.users,
            access=self.session.access,
        )
