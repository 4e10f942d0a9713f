# Overview: Request payload coercion for the JSON routes; shape errors raise ValidationError (400).

from __future__ import annotations

from datetime import date
from typing import Any

from .errors import InvalidQuantity, OrderValidationError
from .time_utils import parse_iso_date


# Maximum money value accepted from a client: 9,999,999.99 (999,999,999 cents)
MAX_AMOUNT_CENTS = 999_999_999


class ValidationError(OrderValidationError):
    """400-level request shape problem (wrong type, malformed value)."""


def require_json_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("JSON object body required")
    return payload


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings (optional leading minus). Rejects bools,
    floats, decimals and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer", field=field)
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)", field=field)
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)", field=field)
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal", field=field)
    raise ValidationError(f"{field} must be an integer", field=field)


def optional_amount_cents(payload: dict, field: str) -> int | None:
    """Money field in cents; None when absent. Sign is checked by the domain rules."""
    if field not in payload or payload[field] is None:
        return None
    value = coerce_int(payload[field], field)
    if abs(value) > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} exceeds maximum allowed value", field=field)
    return value


def optional_str(payload: dict, field: str) -> str | None:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value


def parse_items(payload: dict, field: str = "items") -> list[dict]:
    """
    Shape-check an items array: [{"sku": str, "qty": int}, ...].

    "quantity" is accepted as an alias for "qty"; an item with neither is
    rejected. Quantity rules (integer, coerced up to 1) belong to the order
    service, so quantities are passed through as given.
    """
    raw = payload.get(field)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError(f"{field} must be an array", field=field)

    items = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValidationError(f"{field}[{idx}] must be an object", field=field)
        sku = entry.get("sku")
        if not isinstance(sku, str):
            raise ValidationError(f"{field}[{idx}].sku must be a string", field=field)
        if "qty" in entry:
            qty = entry["qty"]
        elif "quantity" in entry:
            qty = entry["quantity"]
        else:
            raise InvalidQuantity(f"{field}[{idx}].qty is required", field=field, details={"sku": sku})
        items.append({"sku": sku, "qty": qty})
    return items


def parse_date_param(value: str | None, field: str) -> date | None:
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)", field=field)


def parse_paging(args, *, default_limit: int = 50, max_limit: int = 200) -> tuple[int, int]:
    limit = args.get("limit")
    offset = args.get("offset")
    limit = default_limit if limit in (None, "") else coerce_int(limit, "limit")
    offset = 0 if offset in (None, "") else coerce_int(offset, "offset")
    if limit < 1:
        raise ValidationError("limit must be >= 1", field="limit")
    if offset < 0:
        raise ValidationError("offset must be >= 0", field="offset")
    return min(limit, max_limit), offset
