"""
Roles and capability checks for the order ledger.

Every mutating operation asks one of these functions; no other module
branches on role names directly.

ROLES:
- owner: full authority
- admin: same authority as owner
- staff: creates orders, edits only orders they created, reads their own
  commission report
"""

from __future__ import annotations

from .errors import Forbidden


# =============================================================================
# ROLES
# =============================================================================

class Role:
    OWNER = "owner"
    ADMIN = "admin"
    STAFF = "staff"

    ALL = (OWNER, ADMIN, STAFF)


PRIVILEGED_ROLES = frozenset({Role.OWNER, Role.ADMIN})


# =============================================================================
# CAPABILITIES
# =============================================================================

def is_owner(actor) -> bool:
    """owner and admin are the same authority level."""
    return actor is not None and actor.role in PRIVILEGED_ROLES


def can_edit(actor, order) -> bool:
    """owner/admin may edit any order; staff only orders they created."""
    if actor is None:
        return False
    if is_owner(actor):
        return True
    return order.created_by_id == actor.id


def can_replace_items(actor) -> bool:
    return is_owner(actor)


def can_view(actor, order, *, staff_can_view_all: bool = True) -> bool:
    if staff_can_view_all or is_owner(actor):
        return True
    return order.created_by_id == actor.id


def require_owner(actor, action: str = "perform this action") -> None:
    if not is_owner(actor):
        raise Forbidden(f"Only owner or admin may {action}")


def require_can_edit(actor, order) -> None:
    if not can_edit(actor, order):
        raise Forbidden("You can only edit orders you created")


def require_can_replace_items(actor) -> None:
    if not can_replace_items(actor):
        raise Forbidden("Only owner or admin may replace order items")
