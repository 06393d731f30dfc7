"""Notification lifecycle: lookup, recognize, pay.

Every decision is taken from the notification returned by the most recent
fetch. Mutations are always followed by a re-fetch and the workflow never
moves a notification to another status on its own.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum

from ..const import DEFAULT_POLL_INTERVAL
from ..exceptions import NotFoundError, ValidationError, WorkflowStateError, ZonaAzulError
from ..models import Notification, NotificationPayment, UserMatch
from ..services.notifications import NotificationService
from ..services.users import UserService
from ..util import format_brl, is_complete_cpf, normalize_cpf, strip_digits, validate_email

_LOGGER = logging.getLogger(__name__)

ACTION_RECOGNIZE = "recognize"
ACTION_PAY = "pay"

STATUS_LABELS = {
    "pending": "Pendente",
    "recognized": "Reconhecida",
    "paid": "Paga",
    "expired": "Expirada",
    "converted": "Convertida em Multa",
}

STATUS_MESSAGES = {
    "pending": (
        "Esta notificação está pendente de reconhecimento. Por favor, reconheça a "
        "notificação para prosseguir com o pagamento."
    ),
    "recognized": "Esta notificação foi reconhecida. Você pode prosseguir com o pagamento.",
    "paid": "Notificação paga com sucesso! O valor foi convertido em créditos na sua conta.",
    "expired": (
        "Esta notificação expirou e não pode mais ser paga. Entre em contato com a "
        "prefeitura para mais informações."
    ),
    "converted": (
        "Esta notificação foi convertida em multa. Entre em contato com a prefeitura "
        "para mais informações."
    ),
}

_ALLOWED_ACTIONS = {
    "pending": frozenset({ACTION_RECOGNIZE}),
    "recognized": frozenset({ACTION_PAY}),
}


class NotificationScreen(StrEnum):
    NOT_LOADED = "not_loaded"
    NOT_FOUND = "not_found"
    RECOGNIZE = "recognize"
    PAY = "pay"
    PAID = "paid"
    CLOSED = "closed"


def allowed_actions(notification: Notification | None) -> frozenset[str]:
    if notification is None:
        return frozenset()
    return _ALLOWED_ACTIONS.get(notification.status, frozenset())


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def status_message(notification: Notification) -> str:
    return STATUS_MESSAGES.get(notification.status, "")


def paid_confirmation(notification: Notification) -> str:
    return (
        f"O valor de {format_brl(notification.amount)} foi convertido em créditos "
        "na sua conta."
    )


class NotificationWorkflow:
    """Drives one notification through recognition and payment.

    Once the fetched status is ``recognized`` a payment is created
    automatically, at most once per workflow. While that payment is pending
    the notification is re-fetched every ``poll_interval`` seconds until its
    status leaves ``recognized`` or the workflow is closed.
    """

    def __init__(
        self,
        notifications: NotificationService,
        users: UserService,
        notification_number: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        auto_pay: bool = True,
    ) -> None:
        number = (notification_number or "").strip()
        if not number:
            raise ValidationError(
                "notification_number is required.",
                user_message="Digite o número da notificação",
            )
        self._notifications = notifications
        self._users = users
        self._number = number
        self._poll_interval = poll_interval
        self._auto_pay = auto_pay
        self._notification: Notification | None = None
        self._not_found = False
        self._payment: NotificationPayment | None = None
        self._payment_error: ZonaAzulError | None = None
        self._auto_pay_attempted = False
        self._poll_task: asyncio.Task[None] | None = None
        self._closed = False

    async def __aenter__(self) -> NotificationWorkflow:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def notification_number(self) -> str:
        return self._number

    @property
    def notification(self) -> Notification | None:
        return self._notification

    @property
    def not_found(self) -> bool:
        return self._not_found

    @property
    def payment(self) -> NotificationPayment | None:
        return self._payment

    @property
    def payment_error(self) -> ZonaAzulError | None:
        return self._payment_error

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def allowed_actions(self) -> frozenset[str]:
        return allowed_actions(self._notification)

    @property
    def screen(self) -> NotificationScreen:
        if self._not_found:
            return NotificationScreen.NOT_FOUND
        if self._notification is None:
            return NotificationScreen.NOT_LOADED
        status = self._notification.status
        if status == "pending":
            return NotificationScreen.RECOGNIZE
        if status == "recognized":
            return NotificationScreen.PAY
        if status == "paid":
            return NotificationScreen.PAID
        return NotificationScreen.CLOSED

    async def load(self) -> Notification | None:
        """Fetch the notification; a missing one is a state, not an error."""
        try:
            notification = await self._notifications.get_public(self._number)
        except NotFoundError:
            self._notification = None
            self._not_found = True
            await self._stop_polling()
            return None
        self._notification = notification
        self._not_found = False
        await self._after_fetch()
        return notification

    refresh = load

    async def lookup_user(self, cpf: str) -> UserMatch | None:
        """Best-effort prefill of the recognition form from a registered CPF."""
        if not is_complete_cpf(cpf):
            return None
        try:
            return await self._users.find_by_cpf(cpf)
        except NotFoundError:
            return None
        except ZonaAzulError as exc:
            _LOGGER.warning("CPF lookup failed: %s", exc)
            return None

    async def recognize(
        self,
        *,
        cpf: str,
        name: str,
        email: str,
        phone: str | None = None,
        address: str | None = None,
    ) -> Notification | None:
        cpf_digits = normalize_cpf(cpf)
        name_value = (name or "").strip()
        if not name_value:
            raise ValidationError(
                "name is required.",
                user_message="Por favor, informe seu nome completo",
            )
        email_value = validate_email(email)
        self._require_action(ACTION_RECOGNIZE)
        _LOGGER.debug("Recognizing notification %s", self._number)
        await self._notifications.recognize(
            self._number,
            cpf=cpf_digits,
            name=name_value,
            email=email_value,
            phone=strip_digits(phone) or None,
            address=(address or "").strip() or None,
        )
        return await self.load()

    async def pay(self) -> NotificationPayment | None:
        """Create the payment explicitly, e.g. to retry after a failure."""
        self._require_action(ACTION_PAY)
        if self._payment is not None:
            return self._payment
        return await self._create_payment(raise_errors=True)

    async def wait_for_settlement(self, timeout: float | None = None) -> Notification | None:
        """Wait until polling stops and return the last fetched notification."""
        task = self._poll_task
        if task is not None and not task.done():
            await asyncio.wait_for(asyncio.shield(task), timeout)
        return self._notification

    async def close(self) -> None:
        self._closed = True
        await self._stop_polling()

    def _require_action(self, action: str) -> None:
        if self._notification is None:
            raise WorkflowStateError("Notification has not been loaded.")
        if action not in self.allowed_actions:
            raise WorkflowStateError(
                f"Cannot {action} a notification with status {self._notification.status}.",
                user_message=status_message(self._notification) or None,
            )

    async def _after_fetch(self) -> None:
        if self._notification is None or self._notification.status != "recognized":
            await self._stop_polling()
            return
        if self._payment is not None:
            self._ensure_polling()
            return
        if self._auto_pay and not self._auto_pay_attempted:
            self._auto_pay_attempted = True
            await self._create_payment(raise_errors=False)

    async def _create_payment(self, *, raise_errors: bool) -> NotificationPayment | None:
        if self._notification is None:
            raise WorkflowStateError("Notification has not been loaded.")
        self._payment_error = None
        try:
            payment = await self._notifications.create_payment(self._notification.id)
        except ZonaAzulError as exc:
            self._payment_error = exc
            _LOGGER.warning("Payment creation for notification %s failed: %s", self._number, exc)
            if raise_errors:
                raise
            return None
        self._payment = payment
        await self.load()
        return payment

    def _ensure_polling(self) -> None:
        if self._closed or self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll())

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                notification = await self._notifications.get_public(self._number)
            except NotFoundError:
                self._notification = None
                self._not_found = True
                return
            except ZonaAzulError as exc:
                _LOGGER.warning("Polling notification %s failed: %s", self._number, exc)
                continue
            self._notification = notification
            if notification.status != "recognized":
                _LOGGER.debug("Notification %s is now %s", self._number, notification.status)
                return

    async def _stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
