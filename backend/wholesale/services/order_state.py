# Overview: Order status tokens and transition rules.

from __future__ import annotations

from ..errors import UnknownStatus


class OrderStatus:
    PENDING = "pending"
    PAID = "paid"
    PACKED = "packed"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, PAID, PACKED, SHIPPED, COMPLETED, CANCELLED)


INITIAL_STATUS = OrderStatus.PENDING


def normalize_status(token) -> str:
    """
    Canonical status for a client-supplied token (case and whitespace insensitive).

    Any listed status may be set from any other; completed and cancelled are
    terminal in meaning only. Status changes never touch inventory.
    """
    value = token.strip().lower() if isinstance(token, str) else ""
    if value not in OrderStatus.ALL:
        raise UnknownStatus(
            f"status must be one of: {', '.join(OrderStatus.ALL)}",
            field="status",
            details={"status": token if isinstance(token, str) else None},
        )
    return value
