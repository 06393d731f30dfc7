from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from pyzonaazul.access import access_for
from pyzonaazul.cache import QueryCache
from pyzonaazul.exceptions import PermissionDeniedError, ValidationError
from pyzonaazul.mapping import map_zone
from pyzonaazul.models import User
from pyzonaazul.services import ParkingService, UserService, ZoneService
from pyzonaazul.workflows.admin import AdminConsole


class _FakeGateway:
    def __init__(self, routes: dict[tuple[str, str], Any]) -> None:
        self._routes = routes
        self.calls: list[tuple[str, str, Any]] = []

    def _respond(self, method: str, path: str, body: Any) -> Any:
        self.calls.append((method, path, body))
        result = self._routes[(method, path)]
        if isinstance(result, list):
            result = result.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def get(self, path: str, *, params: Any = None) -> Any:
        return self._respond("GET", path, params)

    async def post(self, path: str, json: Any = None) -> Any:
        return self._respond("POST", path, json)

    async def put(self, path: str, json: Any = None) -> Any:
        return self._respond("PUT", path, json)

    async def delete(self, path: str) -> None:
        self._respond("DELETE", path, None)


def _zone(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": "zone-1",
        "code": "Z01",
        "name": "Centro",
        "address": "Rua A",
        "pricePerPeriod": "2.50",
        "periodMinutes": 30,
        "maxTimeMinutes": 120,
        "totalSpots": 10,
        "occupiedSpots": 0,
        "status": "active",
    }
    payload.update(overrides)
    return payload


def _user(role: str) -> User:
    return User(id=f"{role}-1", email=f"{role}@example.com", name=role.title(), role=role)


def _console(
    routes: dict[tuple[str, str], Any],
    *,
    role: str = "admin",
) -> tuple[AdminConsole, _FakeGateway, QueryCache]:
    gateway = _FakeGateway(routes)
    cache = QueryCache(retry_delay=0)
    console = AdminConsole(
        zones=ZoneService(gateway, cache),  # type: ignore[arg-type]
        parkings=ParkingService(gateway, cache),  # type: ignore[arg-type]
        users=UserService(gateway, cache),  # type: ignore[arg-type]
        access=access_for(_user(role)),
    )
    return console, gateway, cache


def test_console_rejects_fiscal() -> None:
    with pytest.raises(PermissionDeniedError):
        _console({}, role="fiscal")


@pytest.mark.asyncio
async def test_create_zone_validation() -> None:
    console, gateway, _ = _console({})

    with pytest.raises(ValidationError) as err:
        await console.create_zone(
            code="",
            name="Centro",
            address="Rua A",
            price_per_period="2.50",
            period_minutes=30,
            max_time_minutes=120,
            total_spots=10,
        )
    assert err.value.user_message == "Preencha todos os campos obrigatórios"
    with pytest.raises(ValidationError):
        await console.create_zone(
            code="Z01",
            name="Centro",
            address="Rua A",
            price_per_period="abc",
            period_minutes=30,
            max_time_minutes=120,
            total_spots=10,
        )
    with pytest.raises(ValidationError):
        await console.create_zone(
            code="Z01",
            name="Centro",
            address="Rua A",
            price_per_period="2,50",
            period_minutes=60,
            max_time_minutes=30,
            total_spots=10,
        )
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_create_zone_invalidates_zone_list() -> None:
    console, gateway, cache = _console({("POST", "/zones"): _zone()})
    cache.set(("zones",), object())

    zone = await console.create_zone(
        code=" Z01 ",
        name="Centro",
        address="Rua A",
        price_per_period="2,50",
        period_minutes=30,
        max_time_minutes=120,
        total_spots=10,
    )
    assert zone.price_per_period == Decimal("2.50")
    assert gateway.calls[0][2] == {
        "code": "Z01",
        "name": "Centro",
        "address": "Rua A",
        "pricePerPeriod": 2.5,
        "periodMinutes": 30,
        "maxTimeMinutes": 120,
        "totalSpots": 10,
    }
    assert ("zones",) not in cache


@pytest.mark.asyncio
async def test_create_zone_without_address() -> None:
    console, gateway, _ = _console({("POST", "/zones"): _zone(address="")})

    await console.create_zone(
        code="Z02",
        name="Orla",
        price_per_period=Decimal("3.00"),
        period_minutes=30,
        max_time_minutes=60,
        total_spots=5,
    )
    assert gateway.calls[0][2]["address"] == ""
    assert gateway.calls[0][2]["code"] == "Z02"


@pytest.mark.asyncio
async def test_toggle_zone_status() -> None:
    console, gateway, _ = _console({("PUT", "/zones/zone-1"): _zone(status="inactive")})

    updated = await console.toggle_zone_status(map_zone(_zone()))
    assert updated.status == "inactive"
    assert gateway.calls[0] == ("PUT", "/zones/zone-1", {"status": "inactive"})


@pytest.mark.asyncio
async def test_set_zone_status_rejects_unknown_status() -> None:
    console, gateway, _ = _console({})
    with pytest.raises(ValidationError):
        await console.set_zone_status("zone-1", "closed")
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_delete_zone() -> None:
    console, gateway, _ = _console({("DELETE", "/zones/zone-1"): None})
    await console.delete_zone("zone-1")
    assert gateway.calls == [("DELETE", "/zones/zone-1", None)]


@pytest.mark.asyncio
async def test_history_filters() -> None:
    console, gateway, _ = _console({("GET", "/parkings/history/all"): {"data": []}})

    await console.history(status="all", zone_id="zone-1", date="2024-03-10", page=2)
    assert gateway.calls[0][2] == {
        "zoneId": "zone-1",
        "startDate": "2024-03-10T00:00:00.000Z",
        "endDate": "2024-03-10T23:59:59.999Z",
        "page": "2",
    }


@pytest.mark.asyncio
async def test_dashboard_metrics() -> None:
    console, _, _ = _console(
        {
            ("GET", "/parkings/dashboard/metrics"): {
                "activeParkings": 12,
                "totalRevenueToday": "150.50",
                "activeUsers": 30,
                "registeredZones": 4,
            }
        }
    )
    metrics = await console.dashboard()
    assert metrics.active_parkings == 12
    assert metrics.total_revenue_today == Decimal("150.50")


@pytest.mark.asyncio
async def test_create_fiscal_validation() -> None:
    console, gateway, _ = _console({})

    with pytest.raises(ValidationError) as err:
        await console.create_fiscal(
            name="A", email="a@example.com", password="12345678", confirm_password="12345678"
        )
    assert err.value.user_message == "Nome deve ter no mínimo 2 caracteres"
    with pytest.raises(ValidationError) as err:
        await console.create_fiscal(
            name="Ana", email="a@example.com", password="1234567", confirm_password="1234567"
        )
    assert err.value.user_message == "Senha deve ter no mínimo 8 caracteres"
    with pytest.raises(ValidationError) as err:
        await console.create_fiscal(
            name="Ana", email="a@example.com", password="12345678", confirm_password="87654321"
        )
    assert err.value.user_message == "As senhas não coincidem"
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_create_fiscal_submits_digits() -> None:
    console, gateway, _ = _console(
        {
            ("POST", "/users/fiscals"): {
                "user": {"id": "f2", "email": "ana@example.com", "name": "Ana", "role": "fiscal"}
            }
        }
    )

    user = await console.create_fiscal(
        name=" Ana ",
        email="ana@example.com",
        password="12345678",
        confirm_password="12345678",
        cpf="123.456.789-00",
        phone="(11) 98765-4321",
    )
    assert user.role == "fiscal"
    assert gateway.calls[0][2] == {
        "name": "Ana",
        "email": "ana@example.com",
        "password": "12345678",
        "cpf": "12345678900",
        "phone": "11987654321",
    }
