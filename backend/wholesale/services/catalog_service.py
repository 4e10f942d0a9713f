# Overview: Read access to the product catalog, with an explicit read-through cache for listings.

from __future__ import annotations

import threading
from dataclasses import dataclass

from sqlalchemy import event, func

from ..extensions import db
from ..models import Product

"""
Catalog read invariants

- lookup() always reads the database, so order snapshots never see a stale
  price or cost.
- list_products() is served from a cache of immutable CatalogEntry values,
  never live ORM rows.
- Any Product insert/update/delete through the ORM invalidates the cache.
  Bulk query.update()/delete() statements bypass mapper events; callers that
  use them must call invalidate() themselves.
"""


@dataclass(frozen=True)
class CatalogEntry:
    sku: str
    name: str
    category: str
    unit_cost_cents: int
    sell_price_cents: int
    is_active: bool

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "unit_cost_cents": self.unit_cost_cents,
            "sell_price_cents": self.sell_price_cents,
            "is_active": self.is_active,
        }


def _entry(p: Product) -> CatalogEntry:
    return CatalogEntry(
        sku=p.sku,
        name=p.name,
        category=p.category,
        unit_cost_cents=p.unit_cost_cents,
        sell_price_cents=p.sell_price_cents,
        is_active=bool(p.is_active),
    )


class _ListingCache:
    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[bool, tuple[CatalogEntry, ...]] = {}
        self.generation = 0

    def get(self, active_only: bool):
        with self._lock:
            return self._entries.get(active_only)

    def put(self, active_only: bool, entries: tuple[CatalogEntry, ...], generation: int) -> None:
        with self._lock:
            # A mutation that landed while we were loading wins; drop the load.
            if generation == self.generation:
                self._entries[active_only] = entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.generation += 1


_cache = _ListingCache()


def invalidate() -> None:
    _cache.clear()


@event.listens_for(Product, "after_insert")
@event.listens_for(Product, "after_update")
@event.listens_for(Product, "after_delete")
def _invalidate_on_product_change(mapper, connection, target):
    invalidate()


def lookup(sku: str | None) -> Product | None:
    """Case-insensitive SKU lookup straight from the database (active or archived)."""
    if not sku or not sku.strip():
        return None
    return (
        db.session.query(Product)
        .filter(func.lower(Product.sku) == sku.strip().lower())
        .first()
    )


def list_products(*, active_only: bool = True) -> list[CatalogEntry]:
    """Catalog listing ordered by category then SKU."""
    cached = _cache.get(active_only)
    if cached is not None:
        return list(cached)

    generation = _cache.generation
    q = db.session.query(Product)
    if active_only:
        q = q.filter(Product.is_active.is_(True))
    rows = q.order_by(Product.category.asc(), Product.sku.asc()).all()

    entries = tuple(_entry(p) for p in rows)
    _cache.put(active_only, entries, generation)
    return list(entries)
