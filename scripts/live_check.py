"""Manual live check against a running Zona Azul API.

Run from the repository root with:
  PYTHONPATH=src ZONAAZUL_API_URL=http://localhost:3000/api/v1 \
  NOTIFICATION_NUMBER=00000007 python scripts/live_check.py

  PYTHONPATH=src EMAIL=... PASSWORD=... LICENSE_PLATE=ABC1234 \
  python scripts/live_check.py

Optional environment variables:
  ZONAAZUL_API_URL
  EMAIL
  PASSWORD
  NOTIFICATION_NUMBER
  LICENSE_PLATE

The notification check is read-only: it never recognizes or pays. With
credentials the script logs in, prints the accessible home view and, for a
fiscal or admin, checks LICENSE_PLATE. License plates are printed masked.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import traceback

from pyzonaazul import Client, ClientConfig, ZonaAzulError
from pyzonaazul.access import access_for
from pyzonaazul.util import format_brl, mask_license_plate
from pyzonaazul.workflows.notification import status_label

_LOGGER = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Zona Azul live check.")
    parser.add_argument("--base-url", dest="base_url", help="API base URL.")
    parser.add_argument("--email", dest="email", help="Email for login.")
    parser.add_argument("--password", dest="password", help="Password for login.")
    parser.add_argument(
        "--notification",
        dest="notification_number",
        help="Public notification number to look up.",
    )
    parser.add_argument("--plate", dest="license_plate", help="License plate to check.")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING).",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Print full tracebacks on errors.",
    )
    return parser.parse_args()


def _print_exception(label: str, exc: Exception, *, trace: bool) -> None:
    if isinstance(exc, ZonaAzulError):
        print(f"{label}: {exc.__class__.__name__}: {exc.as_dict()}", file=sys.stderr)
    else:
        print(f"{label}: {exc.__class__.__name__}: {exc}", file=sys.stderr)
    if trace:
        traceback.print_exc()


async def _check_notification(client: Client, number: str, *, trace: bool) -> bool:
    async with client.notification_workflow(number, auto_pay=False) as workflow:
        try:
            notification = await workflow.load()
        except ZonaAzulError as exc:
            _print_exception("Notification lookup failed", exc, trace=trace)
            return False
        if notification is None:
            print(f"Notification {number}: not found")
            return True
        print(
            f"Notification {notification.notification_number}: "
            f"{status_label(notification.status)} "
            f"{format_brl(notification.amount)} "
            f"plate={mask_license_plate(notification.plate)} "
            f"actions={sorted(workflow.allowed_actions) or '-'}"
        )
    return True


async def _check_session(
    client: Client,
    email: str,
    password: str,
    license_plate: str | None,
    *,
    trace: bool,
) -> bool:
    try:
        user = await client.login(email, password)
    except ZonaAzulError as exc:
        _print_exception("Login failed", exc, trace=trace)
        return False
    access = access_for(user)
    home = access.home_path if access is not None else "-"
    print(f"Logged in as role={user.role} home={home}")
    ok = True
    if license_plate:
        try:
            check = await client.fiscal_desk().check_plate(license_plate)
        except ZonaAzulError as exc:
            _print_exception("Plate check failed", exc, trace=trace)
            ok = False
        else:
            print(
                f"Plate {mask_license_plate(check.plate)}: "
                f"irregular={check.irregular} "
                f"can_create_notification={check.can_create_notification}"
            )
    await client.logout()
    return ok


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=args.log_level.upper())
    base_url = args.base_url or os.getenv("ZONAAZUL_API_URL")
    email = args.email or os.getenv("EMAIL")
    password = args.password or os.getenv("PASSWORD")
    number = args.notification_number or os.getenv("NOTIFICATION_NUMBER")
    license_plate = args.license_plate or os.getenv("LICENSE_PLATE")

    if not number and not (email and password):
        print("Provide NOTIFICATION_NUMBER or EMAIL and PASSWORD.", file=sys.stderr)
        return 2

    try:
        config = ClientConfig.from_env()
    except ZonaAzulError as exc:
        _print_exception("Invalid configuration", exc, trace=args.traceback)
        return 2
    _LOGGER.debug("Checking %s", base_url or config.base_url)

    ok = True
    async with Client(config=config, base_url=base_url) as client:
        if number:
            ok = await _check_notification(client, number, trace=args.traceback) and ok
        if email and password:
            ok = (
                await _check_session(
                    client,
                    email,
                    password,
                    license_plate,
                    trace=args.traceback,
                )
                and ok
            )
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
