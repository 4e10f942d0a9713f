# Overview: Inventory ledger; append-only movements plus a per-SKU running on-hand aggregate.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import InvalidAdjustment, InvalidQuantity, UnknownSku
from ..models import InventoryLevel, InventoryMovement, Product
from ..permissions import require_owner
from wholesale.time_utils import utcnow
from . import catalog_service
from .concurrency import atomic, lock_for_update
from .ledger_service import append_ledger_event
"""
Inventory invariants (authoritative)

- InventoryMovement rows are append-only; stock is never edited in place.
- InventoryLevel.qty_on_hand is a running aggregate written in the same
  transaction as every movement, so on_hand(sku) == movement_sum(sku).
- On-hand may go negative. Backorders are tolerated; deduct() returns the
  quantity before the deduction so callers can warn.
- Functions here flush() only, except adjust() and reconcile(fix=True) which
  are whole operations and commit once.
"""

REASON_ORDER_FULFILLMENT = "order_fulfillment"
REASON_ITEM_REPLACEMENT = "item_replacement"
REASON_MANUAL_ADJUST = "manual_adjust"


def _resolve_sku(sku: str) -> str:
    product = catalog_service.lookup(sku)
    if product is None:
        raise UnknownSku((sku or "").strip())
    return product.sku


def _level_for_update(sku: str) -> InventoryLevel:
    level = lock_for_update(db.session.query(InventoryLevel).filter_by(sku=sku)).first()
    if level is None:
        level = InventoryLevel(sku=sku, qty_on_hand=0)
        db.session.add(level)
        db.session.flush()
    return level


def _record_movement(
    sku: str,
    quantity_delta: int,
    *,
    reason: str,
    order_id: str | None = None,
    actor_id: str | None = None,
    note: str | None = None,
) -> tuple[InventoryMovement, int]:
    """Write one movement and move the aggregate with it. Returns (movement, qty before)."""
    level = _level_for_update(sku)
    before = level.qty_on_hand

    movement = InventoryMovement(
        sku=sku,
        quantity_delta=quantity_delta,
        reason=reason,
        order_id=order_id,
        actor_id=actor_id,
        note=note,
        occurred_at=utcnow(),
    )
    db.session.add(movement)

    level.qty_on_hand = before + quantity_delta
    level.updated_at = utcnow()
    db.session.flush()
    return movement, before


def deduct(
    sku: str,
    qty: int,
    *,
    reason: str = REASON_ORDER_FULFILLMENT,
    ref_order_id: str | None = None,
    actor_id: str | None = None,
) -> int:
    """
    Remove qty units of sku from stock.

    Never refuses for lack of stock. Returns on-hand before the deduction.
    """
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise InvalidQuantity("deduction quantity must be a positive integer", field="quantity")
    canonical = _resolve_sku(sku)
    _, before = _record_movement(
        canonical, -qty, reason=reason, order_id=ref_order_id, actor_id=actor_id,
    )
    return before


def apply_deltas(
    deltas_by_sku: dict[str, int],
    *,
    reason: str,
    ref_order_id: str | None = None,
    actor_id: str | None = None,
) -> list[InventoryMovement]:
    """One movement per SKU with a non-zero net delta, in SKU order."""
    movements = []
    for sku in sorted(deltas_by_sku):
        delta = deltas_by_sku[sku]
        if not delta:
            continue
        movement, _ = _record_movement(
            _resolve_sku(sku), delta, reason=reason, order_id=ref_order_id, actor_id=actor_id,
        )
        movements.append(movement)
    return movements


def adjust(sku: str, delta, *, actor, reason: str | None = None, note: str | None = None) -> dict:
    """
    Manual stock correction (owner/admin only).

    delta is any non-zero integer. Commits as one operation together with its
    ledger event.
    """
    require_owner(actor, "adjust inventory")
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise InvalidAdjustment("delta must be an integer", field="delta")
    if delta == 0:
        raise InvalidAdjustment("delta must be non-zero", field="delta")
    reason = (reason or "").strip() or REASON_MANUAL_ADJUST

    with atomic():
        canonical = _resolve_sku(sku)
        movement, before = _record_movement(
            canonical, delta, reason=reason, actor_id=actor.id, note=note,
        )
        append_ledger_event(
            event_type="inventory.adjusted",
            entity_type="inventory_movement",
            entity_id=str(movement.id),
            actor_id=actor.id,
            note=note,
            payload={"sku": canonical, "delta": delta, "reason": reason, "qty_before": before},
        )

    return {
        "movement": movement.to_dict(),
        "qty_before": before,
        "qty_on_hand": before + delta,
    }


def on_hand(sku: str) -> int:
    level = db.session.get(InventoryLevel, sku)
    return level.qty_on_hand if level else 0


def movement_sum(sku: str) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(InventoryMovement.quantity_delta), 0))
        .filter(InventoryMovement.sku == sku)
        .scalar()
    )
    return int(total or 0)


def reconcile(*, fix: bool = False) -> list[dict]:
    """
    Compare every SKU's aggregate with its movement log.

    Returns one row per mismatch. With fix=True the aggregates are rewritten
    from the log and committed.
    """
    sums = dict(
        db.session.query(InventoryMovement.sku, func.sum(InventoryMovement.quantity_delta))
        .group_by(InventoryMovement.sku)
        .all()
    )
    levels = {lvl.sku: lvl for lvl in db.session.query(InventoryLevel).all()}

    mismatches = []
    for sku in sorted(set(sums) | set(levels)):
        expected = int(sums.get(sku) or 0)
        level = levels.get(sku)
        actual = level.qty_on_hand if level else 0
        if expected != actual:
            mismatches.append({"sku": sku, "qty_on_hand": actual, "movement_sum": expected})

    if fix and mismatches:
        with atomic():
            for row in mismatches:
                level = levels.get(row["sku"]) or _level_for_update(row["sku"])
                level.qty_on_hand = row["movement_sum"]
                level.updated_at = utcnow()
            db.session.flush()

    return mismatches


def list_inventory(*, include_archived: bool = False) -> list[dict]:
    """Catalog rows joined with on-hand, ordered by category then SKU."""
    q = (
        db.session.query(Product, InventoryLevel.qty_on_hand)
        .outerjoin(InventoryLevel, InventoryLevel.sku == Product.sku)
    )
    if not include_archived:
        q = q.filter(Product.is_active.is_(True))
    rows = q.order_by(Product.category.asc(), Product.sku.asc()).all()

    return [
        {
            "sku": p.sku,
            "name": p.name,
            "category": p.category,
            "is_active": p.is_active,
            "qty_on_hand": int(qty or 0),
        }
        for p, qty in rows
    ]


def get_inventory_summary(sku: str, *, movement_limit: int = 50) -> dict:
    canonical = _resolve_sku(sku)
    movements = (
        db.session.query(InventoryMovement)
        .filter_by(sku=canonical)
        .order_by(InventoryMovement.occurred_at.desc(), InventoryMovement.id.desc())
        .limit(movement_limit)
        .all()
    )
    return {
        "sku": canonical,
        "qty_on_hand": on_hand(canonical),
        "movements": [m.to_dict() for m in movements],
    }
