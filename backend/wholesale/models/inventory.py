from __future__ import annotations

from ..extensions import db
from wholesale.time_utils import to_utc_z, utcnow


class InventoryMovement(db.Model):
    """
    One signed change to a SKU's stock. Append-only.

    quantity_delta < 0: stock leaves (order fulfillment, negative adjustment)
    quantity_delta > 0: stock returns or arrives (item replacement, adjustment)

    The movement log is the source of truth; InventoryLevel is a running
    aggregate of it kept in the same transaction.
    """
    __tablename__ = "inventory_movements"
    __table_args__ = (
        db.Index("ix_inventory_movements_sku_occurred", "sku", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(64), db.ForeignKey("products.sku"), nullable=False, index=True)
    quantity_delta = db.Column(db.Integer, nullable=False)

    # order_fulfillment | item_replacement | manual_adjust | free text for manual adjustments
    reason = db.Column(db.String(64), nullable=False)

    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=True, index=True)
    actor_id = db.Column(db.String(64), db.ForeignKey("profiles.id"), nullable=True, index=True)
    note = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "quantity_delta": self.quantity_delta,
            "reason": self.reason,
            "order_id": self.order_id,
            "actor_id": self.actor_id,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }


class InventoryLevel(db.Model):
    """
    Running on-hand aggregate per SKU.

    Invariant: qty_on_hand == SUM(InventoryMovement.quantity_delta) for the SKU.
    Only inventory_service writes this table, and only alongside a movement.
    May be negative (backorders are tolerated).
    """
    __tablename__ = "inventory_levels"

    sku = db.Column(db.String(64), db.ForeignKey("products.sku"), primary_key=True)
    qty_on_hand = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "qty_on_hand": self.qty_on_hand,
            "updated_at": to_utc_z(self.updated_at),
        }
