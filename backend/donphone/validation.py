from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from .time_utils import ensure_utc, parse_iso_datetime


# Maximum money amount: R$ 9.999.999,99
MAX_AMOUNT = 9_999_999.99


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., user id already taken, sale already cancelled)."""


class NotFoundError(LookupError):
    """404-level missing record."""


@dataclass(frozen=True)
class DocumentPolicy:
    """
    Central policy layer for a document collection:
    - fields: writable field name -> coercer (security boundary)
    - required_on_create: fields required for create
    """
    fields: dict[str, Callable[[str, Any], Any]]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


def as_text(key: str, value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def as_email(key: str, value: Any) -> str | None:
    text = as_text(key, value)
    if not text:
        return text
    if "@" not in text:
        raise ValidationError(f"{key} must be a valid e-mail address")
    return text.lower()


def as_amount(key: str, value: Any) -> float | None:
    """
    Money value in reais. Accepts numbers and strings with either decimal
    separator ("12.50", "12,50").
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        stripped = value.strip().replace(",", ".")
        if not stripped:
            raise ValidationError(f"{key} must be a number")
        try:
            amount = float(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")

    if amount < 0:
        raise ValidationError(f"{key} must be >= 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{key} cannot exceed {MAX_AMOUNT:,.2f}")
    return round(amount, 2)


def as_int(key: str, value: Any) -> int | None:
    if value is None:
        return None
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{key} must be an integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    raise ValidationError(f"{key} must be an integer")


def as_non_negative_int(key: str, value: Any) -> int | None:
    number = as_int(key, value)
    if number is not None and number < 0:
        raise ValidationError(f"{key} must be >= 0")
    return number


def as_datetime(key: str, value: Any) -> datetime | None:
    """Accept datetimes or ISO-8601 strings; normalize to aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        try:
            dt = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{key} must be an ISO-8601 datetime")
        return dt
    raise ValidationError(f"{key} must be an ISO-8601 datetime")


def one_of(*choices: str) -> Callable[[str, Any], str | None]:
    def coerce(key: str, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        if text not in choices:
            raise ValidationError(f"{key} must be one of: {', '.join(choices)}")
        return text
    return coerce


def list_of(item_coercer: Callable[[str, Any], Any]) -> Callable[[str, Any], list]:
    def coerce(key: str, value: Any) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValidationError(f"{key} must be a list")
        return [item_coercer(f"{key}[{i}]", item) for i, item in enumerate(value)]
    return coerce


def validate_document(payload: Any, *, policy: DocumentPolicy, partial: bool) -> dict:
    """
    Validates + normalizes an incoming JSON object against a policy.
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    for k in payload.keys():
        if k not in policy.fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        value = policy.fields[k](k, raw)
        if k in policy.required_on_create and value in (None, ""):
            raise ValidationError(f"{k} cannot be blank")
        patch[k] = value
    return patch
