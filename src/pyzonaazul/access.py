"""Role-based access: capability sets per role and the route guard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from .const import ADMIN_HOME_PATH, FISCAL_HOME_PATH, LOGIN_PATH, PUBLIC_NOTIFICATION_PATH
from .exceptions import AuthError, PermissionDeniedError
from .models import User

PERMISSION_DENIED_MESSAGE = "Você não tem permissão para acessar este aplicativo."


class Capability(StrEnum):
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_ZONES = "manage_zones"
    LOOKUP_PLATES = "lookup_plates"
    VIEW_HISTORY = "view_history"
    REVIEW_SETTLEMENTS = "review_settlements"
    CREATE_FISCALS = "create_fiscals"
    ISSUE_NOTIFICATIONS = "issue_notifications"
    CREATE_AVULSO_PARKINGS = "create_avulso_parkings"
    VIEW_SETTLEMENTS = "view_settlements"
    GENERATE_SETTLEMENTS = "generate_settlements"


_FISCAL_CAPABILITIES = frozenset(
    {
        Capability.LOOKUP_PLATES,
        Capability.ISSUE_NOTIFICATIONS,
        Capability.CREATE_AVULSO_PARKINGS,
        Capability.VIEW_SETTLEMENTS,
        Capability.GENERATE_SETTLEMENTS,
    }
)


@dataclass(frozen=True, slots=True)
class _RoleAccess:
    user: User

    role: ClassVar[str]
    home_path: ClassVar[str]
    capabilities: ClassVar[frozenset[Capability]]

    def allows(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True, slots=True)
class AdminAccess(_RoleAccess):
    role: ClassVar[str] = "admin"
    home_path: ClassVar[str] = ADMIN_HOME_PATH
    # Admins can reach every fiscal screen as well.
    capabilities: ClassVar[frozenset[Capability]] = frozenset(Capability)


@dataclass(frozen=True, slots=True)
class FiscalAccess(_RoleAccess):
    role: ClassVar[str] = "fiscal"
    home_path: ClassVar[str] = FISCAL_HOME_PATH
    capabilities: ClassVar[frozenset[Capability]] = _FISCAL_CAPABILITIES


Access = AdminAccess | FiscalAccess

_ACCESS_BY_ROLE: dict[str, type[AdminAccess] | type[FiscalAccess]] = {
    AdminAccess.role: AdminAccess,
    FiscalAccess.role: FiscalAccess,
}


def access_for(user: User | None) -> Access | None:
    """Return the access variant for ``user``, or None for other roles."""
    if user is None:
        return None
    access_cls = _ACCESS_BY_ROLE.get(user.role)
    return access_cls(user) if access_cls is not None else None


def require_capability(access: Access | None, capability: Capability) -> Access:
    if access is None:
        raise AuthError("Authentication required.", status=401)
    if not access.allows(capability):
        raise PermissionDeniedError(
            f"Role {access.role} lacks {capability}.",
            user_message=PERMISSION_DENIED_MESSAGE,
        )
    return access


ROUTE_ROLES: dict[str, tuple[str, ...]] = {
    "/dashboard": ("admin",),
    "/zones": ("admin",),
    "/plate-lookup": ("admin",),
    "/history": ("admin",),
    "/admin/settlements": ("admin",),
    "/admin/fiscals/new": ("admin",),
    "/fiscal/dashboard": ("fiscal", "admin"),
    "/fiscal/settlements": ("fiscal", "admin"),
}


def is_public_path(path: str) -> bool:
    return path == LOGIN_PATH or path.startswith(PUBLIC_NOTIFICATION_PATH)


def guard_route(user: User | None, path: str) -> str:
    """Return the path to render for ``path``: itself, or a redirect target."""
    if path == "/":
        return LOGIN_PATH
    allowed_roles = ROUTE_ROLES.get(path)
    if allowed_roles is None:
        return path
    if user is None:
        return LOGIN_PATH
    if user.role not in allowed_roles:
        if user.role == FiscalAccess.role:
            return FISCAL_HOME_PATH
        return ADMIN_HOME_PATH
    return path
