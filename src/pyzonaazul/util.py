"""Shared utilities for validation, normalization and formatting."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from .exceptions import ValidationError

_LICENSE_PLATE_RE = re.compile(r"[^A-Z0-9]")
_NON_DIGIT_RE = re.compile(r"\D")

CPF_LENGTH = 11


def normalize_license_plate(plate: str) -> str:
    if not isinstance(plate, str):
        raise ValidationError("License plate must be a string.")
    normalized = _LICENSE_PLATE_RE.sub("", plate.upper())
    if not normalized:
        raise ValidationError(
            "License plate is empty after normalization.",
            user_message="A placa é obrigatória",
        )
    return normalized


def format_license_plate(value: str) -> str:
    """Format a plate as typed: ``ABC-1234`` (Mercosul plates keep letters)."""
    cleaned = _LICENSE_PLATE_RE.sub("", value.upper()) if isinstance(value, str) else ""
    if len(cleaned) <= 3:
        return cleaned
    return f"{cleaned[:3]}-{cleaned[3:7]}"


def mask_license_plate(plate: str) -> str:
    if not isinstance(plate, str):
        return "***"
    normalized = _LICENSE_PLATE_RE.sub("", plate.upper())
    if not normalized:
        return "***"
    if len(normalized) <= 2:
        return "*" * len(normalized)
    if len(normalized) <= 4:
        return f"{normalized[:1]}{'*' * (len(normalized) - 2)}{normalized[-1:]}"
    masked = "*" * (len(normalized) - 4)
    return f"{normalized[:2]}{masked}{normalized[-2:]}"


def strip_digits(value: str | None) -> str:
    """Return only the digits of ``value``."""
    if not value:
        return ""
    return _NON_DIGIT_RE.sub("", value)


def is_complete_cpf(value: str | None) -> bool:
    return len(strip_digits(value)) == CPF_LENGTH


def normalize_cpf(value: str | None) -> str:
    digits = strip_digits(value)
    if len(digits) != CPF_LENGTH:
        raise ValidationError(
            "CPF must contain 11 digits.",
            user_message="Por favor, informe um CPF válido",
        )
    return digits


def mask_cpf(value: str) -> str:
    digits = strip_digits(value)[:CPF_LENGTH]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}.{digits[3:]}"
    if len(digits) <= 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def mask_phone(value: str) -> str:
    digits = strip_digits(value)[:11]
    if len(digits) <= 2:
        return digits
    area, number = digits[:2], digits[2:]
    if len(number) < 8:
        return f"({area}) {number}"
    return f"({area}) {number[:-4]}-{number[-4:]}"


def validate_email(value: str | None) -> str:
    email = (value or "").strip()
    if not email:
        raise ValidationError("email is required.", user_message="Por favor, informe seu email")
    if "@" not in email:
        raise ValidationError(
            "email must contain '@'.",
            user_message="Por favor, informe um email válido",
        )
    return email


def parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValidationError("Timestamp must be a non-empty string.")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError("Timestamp is not a valid ISO 8601 value.") from exc
    if parsed.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    return parsed.astimezone(UTC)


def format_utc_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    normalized = value.astimezone(UTC).replace(microsecond=0)
    return normalized.isoformat().replace("+00:00", "Z")


def ensure_utc_timestamp(value: str) -> str:
    return format_utc_timestamp(parse_timestamp(value))


def format_duration(minutes: int | None) -> str:
    if not minutes:
        return "N/A"
    if minutes < 60:
        return f"{minutes} min"
    hours, remainder = divmod(minutes, 60)
    if not remainder:
        return f"{hours}h"
    return f"{hours}h {remainder}min"


def format_time_remaining(end_time: str, now: datetime | None = None) -> str:
    end = parse_timestamp(end_time)
    current = now or datetime.now(UTC)
    seconds = (end - current).total_seconds()
    if seconds <= 0:
        return "Expirado"
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}min"


def format_brl(value: Decimal | int | float | str) -> str:
    """Format an amount as Brazilian reais, e.g. ``R$ 1.234,50``."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{amount:,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")
