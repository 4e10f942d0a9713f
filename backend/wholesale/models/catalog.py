from __future__ import annotations

from ..extensions import db
from wholesale.time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Catalog product master data.

    SKU is the canonical key: order lines, inventory movements and inventory
    levels all reference products by SKU. Products are archived
    (is_active=False) instead of deleted so historical orders keep a valid
    reference.

    Prices are authoritative in centavos; order lines copy them at order time
    and never read them back.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_sku", "category", "sku"),
        db.Index("ix_products_active", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(64), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)

    unit_cost_cents = db.Column(db.Integer, nullable=False, default=0)
    sell_price_cents = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Product sku={self.sku!r} name={self.name!r} active={self.is_active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "unit_cost_cents": self.unit_cost_cents,
            "sell_price_cents": self.sell_price_cents,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CourierRate(db.Model):
    """Courier cost per online shipping region (the rate table)."""
    __tablename__ = "courier_rates"

    region = db.Column(db.String(32), primary_key=True)
    cost_cents = db.Column(db.Integer, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "region": self.region,
            "cost_cents": self.cost_cents,
            "updated_at": to_utc_z(self.updated_at),
        }
