"""Session lifecycle: login, logout and restoring a stored session."""

from __future__ import annotations

import logging

from .access import PERMISSION_DENIED_MESSAGE, Access, Capability, access_for, require_capability
from .const import ALLOWED_ROLES
from .exceptions import AuthError, PermissionDeniedError, ValidationError, ZonaAzulError
from .models import User
from .services.auth import AuthService
from .services.users import UserService
from .storage import SessionStore
from .util import validate_email

_LOGGER = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class SessionManager:
    """Owns the signed-in user and the persisted tokens.

    The manager is the single holder of session state; workflows receive it
    (or the ``Access`` it produces) explicitly instead of reading globals.
    """

    def __init__(self, auth: AuthService, users: UserService, store: SessionStore) -> None:
        self._auth = auth
        self._users = users
        self._store = store
        self._user: User | None = None

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def access(self) -> Access | None:
        return access_for(self._user)

    def require(self, capability: Capability) -> Access:
        return require_capability(self.access, capability)

    def forget(self) -> None:
        """Drop the signed-in user and stored tokens without calling the API."""
        self._user = None
        self._store.clear()

    async def login(self, email: str, password: str) -> User:
        email_value = validate_email(email)
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                "password must have at least 6 characters.",
                user_message="A senha deve ter no mínimo 6 caracteres",
            )
        _LOGGER.debug("Login started")
        result = await self._auth.login(email_value, password)
        self._store.save_tokens(result.token, result.refresh_token)
        try:
            user = await self._users.me()
        except AuthError:
            self.forget()
            raise
        except ZonaAzulError as exc:
            _LOGGER.warning("Fetching the full profile failed (%s); using login profile", exc)
            user = result.user
        if user.role not in ALLOWED_ROLES:
            self.forget()
            raise PermissionDeniedError(
                PERMISSION_DENIED_MESSAGE,
                user_message=PERMISSION_DENIED_MESSAGE,
            )
        self._store.save_user(user)
        self._user = user
        _LOGGER.debug("Login completed for role %s", user.role)
        return user

    async def logout(self) -> None:
        try:
            await self._auth.logout(self._store.refresh_token)
        except ZonaAzulError as exc:
            _LOGGER.warning("Logout request failed: %s", exc)
        finally:
            self.forget()

    async def restore(self) -> User | None:
        """Re-validate a stored session; any failure signs the user out silently."""
        if not self._store.token:
            return None
        try:
            user = await self._users.me()
        except ZonaAzulError as exc:
            _LOGGER.debug("Stored session is no longer valid: %s", exc)
            self.forget()
            return None
        self._store.save_user(user)
        self._user = user
        return user

    async def refresh_access_token(self) -> str:
        refresh_token = self._store.refresh_token
        if not refresh_token:
            raise AuthError("No refresh token is stored.", status=401)
        token = await self._auth.refresh(refresh_token)
        self._store.save_tokens(token)
        return token
