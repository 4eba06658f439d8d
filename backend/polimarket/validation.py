from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidInput
from .models import MovementKind, PartyProfile
from .money import MAX_PRICE, to_money
from .time_utils import parse_iso_datetime

# Quantities are stored in 32-bit integer columns
MAX_QUANTITY = 2**31 - 1


def parse_id(value: Any, label: str) -> uuid.UUID:
    """Parse an opaque identifier; the message never echoes the raw input."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid {label} id")
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise InvalidInput(f"Invalid {label} id")


def _in_range(value: int, field: str) -> int:
    if abs(value) > MAX_QUANTITY:
        raise InvalidInput(f"{field} must be between -{MAX_QUANTITY} and {MAX_QUANTITY}")
    return value


def parse_int(value: Any, field: str) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings; rejects bools, floats, decimals and
    scientific notation so "2.5" or "1e3" never silently become quantities.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return _in_range(value, field)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidInput(f"{field} must be an integer")
        if "e" in stripped.lower() or "." in stripped:
            raise InvalidInput(f"{field} must be a plain integer")
        try:
            number = int(stripped)
        except ValueError:
            raise InvalidInput(f"{field} must be an integer")
        return _in_range(number, field)
    raise InvalidInput(f"{field} must be an integer")


def parse_price(value: Any, field: str = "unit_price") -> Decimal:
    """
    Parse a price into an exact Decimal quantized to cents.

    JSON floats are converted through their shortest repr (12.5 -> "12.5")
    so no binary floating-point value is ever stored.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"{field} is required")
    if isinstance(value, Decimal):
        amount = value
    else:
        if isinstance(value, float):
            value = repr(value)
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidInput(f"{field} must be a decimal number")
    if not amount.is_finite():
        raise InvalidInput(f"{field} must be a decimal number")
    amount = to_money(amount)
    if amount > MAX_PRICE:
        raise InvalidInput(f"{field} exceeds maximum allowed")
    return amount


def require_text(value: Any, field: str, max_length: int) -> str:
    if value is None or not str(value).strip():
        raise InvalidInput(f"{field} is required")
    text = str(value).strip()
    if len(text) > max_length:
        raise InvalidInput(f"{field} exceeds max length {max_length}")
    return text


def optional_text(value: Any, field: str, max_length: int) -> str | None:
    if value is None or not str(value).strip():
        return None
    return require_text(value, field, max_length)


def parse_movement_kind(value: Any) -> MovementKind:
    """Case-insensitive match against INBOUND / OUTBOUND / ADJUSTMENT."""
    if isinstance(value, MovementKind):
        return value
    allowed = ", ".join(k.value for k in MovementKind)
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid movement kind. Allowed values: {allowed}")
    try:
        return MovementKind(value.strip().upper())
    except ValueError:
        raise InvalidInput(f"Invalid movement kind. Allowed values: {allowed}")


def parse_profile(value: Any) -> PartyProfile:
    if isinstance(value, PartyProfile):
        return value
    allowed = ", ".join(p.value for p in PartyProfile)
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid profile. Allowed values: {allowed}")
    try:
        return PartyProfile(value.strip().upper())
    except ValueError:
        raise InvalidInput(f"Invalid profile. Allowed values: {allowed}")


def parse_optional_datetime(value: Any, field: str) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"{field} must be an ISO-8601 datetime")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise InvalidInput(f"{field} must be an ISO-8601 datetime")
