from __future__ import annotations

import uuid

from sqlalchemy import event, inspect

from ..extensions import db
from wholesale.time_utils import to_utc_z, utcnow


class OrderChannel:
    """Sales channels an order can come through."""
    ONLINE = "online"
    LALAMOVE = "lalamove"
    WALKIN = "walkin"
    TIKTOK = "tiktok"

    ALL = (ONLINE, LALAMOVE, WALKIN, TIKTOK)


def _new_order_id() -> str:
    return str(uuid.uuid4())


class Order(db.Model):
    """
    Wholesale order header.

    Identity is an opaque UUID plus a human-typeable sequential code
    (ORD-000123); both are lookup keys.

    Financial fields stored here are inputs only (shipping paid, courier cost,
    discount). Subtotals, profit and commission are derived on every read by
    pricing_service and never stored.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_created_at", "created_at"),
        db.Index("ix_orders_creator_created", "created_by_id", "created_at"),
        db.Index("ix_orders_channel_created", "channel", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_new_order_id)
    order_code = db.Column(db.String(32), nullable=False, unique=True)

    channel = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    customer_name = db.Column(db.String(255), nullable=False)
    contact_link = db.Column(db.String(512), nullable=True)
    phone_number = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # Online channel only; forced to NULL / 0 for every other channel
    region = db.Column(db.String(32), nullable=True)
    shipping_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    courier_cost_cents = db.Column(db.Integer, nullable=False, default=0)

    discount_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_reason = db.Column(db.String(255), nullable=True)
    discount_updated_by_id = db.Column(db.String(64), db.ForeignKey("profiles.id"), nullable=True)
    discount_updated_at = db.Column(db.DateTime, nullable=True)

    created_by_id = db.Column(db.String(64), db.ForeignKey("profiles.id"), nullable=False)
    # Creator's commission rate at order time (bps); NULL on rows that predate the snapshot
    commission_rate_bps = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    items = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )
    created_by = db.relationship("Profile", foreign_keys=[created_by_id])
    discount_updated_by = db.relationship("Profile", foreign_keys=[discount_updated_by_id])

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_online(self) -> bool:
        return self.channel == OrderChannel.ONLINE

    def __repr__(self) -> str:
        return f"<Order {self.order_code} channel={self.channel} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_code": self.order_code,
            "channel": self.channel,
            "status": self.status,
            "customer_name": self.customer_name,
            "contact_link": self.contact_link,
            "phone_number": self.phone_number,
            "notes": self.notes,
            "region": self.region,
            "shipping_paid_cents": self.shipping_paid_cents,
            "courier_cost_cents": self.courier_cost_cents,
            "discount_amount_cents": self.discount_amount_cents,
            "discount_reason": self.discount_reason,
            "discount_updated_by_id": self.discount_updated_by_id,
            "discount_updated_at": to_utc_z(self.discount_updated_at),
            "created_by_id": self.created_by_id,
            "created_by_name": self.created_by.display_name if self.created_by else None,
            "commission_rate_bps": self.commission_rate_bps,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class OrderItem(db.Model):
    """
    Order line with category/cost/price snapshotted from the catalog at order time.

    Snapshot columns are write-once. Changing an order's items means deleting
    its lines and writing new ones (order_service.replace_items).
    """
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    SNAPSHOT_FIELDS = ("sku", "category_at_time", "unit_cost_at_time_cents", "sell_price_at_time_cents")

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    sku = db.Column(db.String(64), db.ForeignKey("products.sku"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    category_at_time = db.Column(db.String(64), nullable=False)
    unit_cost_at_time_cents = db.Column(db.Integer, nullable=False)
    sell_price_at_time_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    order = db.relationship("Order", back_populates="items")

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.sell_price_at_time_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "sku": self.sku,
            "quantity": self.quantity,
            "category_at_time": self.category_at_time,
            "unit_cost_at_time_cents": self.unit_cost_at_time_cents,
            "sell_price_at_time_cents": self.sell_price_at_time_cents,
            "line_total_cents": self.line_total_cents,
            "created_at": to_utc_z(self.created_at),
        }


@event.listens_for(OrderItem, "before_update")
def _reject_snapshot_rewrite(mapper, connection, target):
    state = inspect(target)
    for field in OrderItem.SNAPSHOT_FIELDS:
        if state.attrs[field].history.has_changes():
            raise ValueError(f"order item {field} is a snapshot and cannot be changed")


class OrderSequence(db.Model):
    """
    Atomic counters for human-readable document codes.

    One row per document type; allocation is an UPDATE ... SET next_number =
    next_number + 1 inside the caller's transaction.
    """
    __tablename__ = "order_sequences"

    id = db.Column(db.Integer, primary_key=True)
    document_type = db.Column(db.String(32), nullable=False, unique=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
