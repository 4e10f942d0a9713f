"""
Order intake, edits and item replacement.

Every public mutation here is one transaction: validation runs first and
fails fast, then the order, its lines, its inventory movements and its ledger
event are flushed together and committed once. Any failure leaves no order,
no movement and no consumed order code.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..errors import (
    CourierRateMissing,
    CustomerNameRequired,
    InvalidContactLink,
    InvalidQuantity,
    InvalidShipping,
    NoItems,
    NotFound,
    PhoneRequired,
    ProductArchived,
    RegionRequired,
    UnknownChannel,
    UnknownSku,
)
from ..models import Order, OrderChannel, OrderItem
from ..permissions import (
    can_edit,
    can_replace_items,
    can_view,
    is_owner,
    require_can_edit,
    require_can_replace_items,
    require_owner,
)
from wholesale.time_utils import utcnow
from . import catalog_service, inventory_service, pricing_service
from .concurrency import atomic, lock_for_update
from .discount_service import normalize_reason, validate_discount
from .ledger_service import append_ledger_event, list_events_for
from .order_state import INITIAL_STATUS, normalize_status
from .rate_service import RateTable, configured_regions, courier_cost_for_region
from .sequence_service import next_order_code


@dataclass(frozen=True)
class LineDraft:
    """A validated, snapshotted line not yet written."""
    sku: str
    quantity: int
    category_at_time: str
    unit_cost_at_time_cents: int
    sell_price_at_time_cents: int


@dataclass
class OrderWriteResult:
    order: Order
    # SKUs that went to or below zero: [{"sku", "requested", "qty_on_hand_before"}]
    stock_warnings: list[dict] = field(default_factory=list)


# =============================================================================
# Input validation
# =============================================================================

def _coerce_quantity(raw, sku: str) -> int:
    if isinstance(raw, bool):
        raise InvalidQuantity(f"quantity for {sku} must be an integer", field="items", details={"sku": sku})
    if isinstance(raw, int):
        qty = raw
    elif isinstance(raw, str) and re.fullmatch(r"-?\d+", raw.strip()):
        qty = int(raw.strip())
    else:
        raise InvalidQuantity(f"quantity for {sku} must be an integer", field="items", details={"sku": sku})
    return max(qty, 1)


def prepare_items(items) -> list[LineDraft]:
    """
    Validate requested items and snapshot them from the catalog.

    Each entry is {"sku", "qty"} ("quantity" accepted as an alias). Duplicate
    SKUs (case-insensitive) merge into one line, first occurrence keeps its
    position. Quantities below 1 are raised to 1.
    """
    if not items:
        raise NoItems("An order needs at least one item", field="items")

    merged: dict[str, int] = {}
    products = {}
    for entry in items:
        sku = (entry.get("sku") or "").strip()
        product = catalog_service.lookup(sku)
        if product is None:
            raise UnknownSku(sku)
        if not product.is_active:
            raise ProductArchived(product.sku)

        if "qty" in entry:
            raw_qty = entry["qty"]
        elif "quantity" in entry:
            raw_qty = entry["quantity"]
        else:
            raise InvalidQuantity(
                f"quantity for {product.sku} is required", field="items", details={"sku": product.sku},
            )
        qty = _coerce_quantity(raw_qty, product.sku)
        merged[product.sku] = merged.get(product.sku, 0) + qty
        products[product.sku] = product

    return [
        LineDraft(
            sku=sku,
            quantity=qty,
            category_at_time=products[sku].category,
            unit_cost_at_time_cents=products[sku].unit_cost_cents,
            sell_price_at_time_cents=products[sku].sell_price_cents,
        )
        for sku, qty in merged.items()
    ]


def _clean_contact_link(value: str | None) -> str | None:
    value = (value or "").strip()
    if not value:
        return None
    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise InvalidContactLink("contact_link must be an http(s) URL", field="contact_link")
    return value


def _clean_shipping(channel: str, region: str | None, shipping_paid_cents) -> tuple[str | None, int]:
    if channel != OrderChannel.ONLINE:
        return None, 0

    region = (region or "").strip().lower()
    if region not in configured_regions():
        raise RegionRequired(
            f"Online orders need a region ({', '.join(configured_regions())})",
            field="region",
        )

    if shipping_paid_cents is None:
        shipping_paid_cents = 0
    if isinstance(shipping_paid_cents, bool) or not isinstance(shipping_paid_cents, int):
        raise InvalidShipping("shipping_paid must be an integer (cents)", field="shipping_paid_cents")
    if shipping_paid_cents < 0:
        raise InvalidShipping("shipping_paid cannot be negative", field="shipping_paid_cents")
    return region, shipping_paid_cents


def _items_by_sku(lines) -> dict[str, int]:
    totals: dict[str, int] = {}
    for line in lines:
        totals[line.sku] = totals.get(line.sku, 0) + line.quantity
    return totals


def _deduct_lines(order: Order, drafts: list[LineDraft], actor_id: str) -> list[dict]:
    warnings = []
    for draft in drafts:
        before = inventory_service.deduct(
            draft.sku,
            draft.quantity,
            reason=inventory_service.REASON_ORDER_FULFILLMENT,
            ref_order_id=order.id,
            actor_id=actor_id,
        )
        if before < draft.quantity:
            warnings.append({"sku": draft.sku, "requested": draft.quantity, "qty_on_hand_before": before})
    return warnings


def _add_lines(order: Order, drafts: list[LineDraft]) -> None:
    for position, draft in enumerate(drafts):
        order.items.append(OrderItem(
            position=position,
            sku=draft.sku,
            quantity=draft.quantity,
            category_at_time=draft.category_at_time,
            unit_cost_at_time_cents=draft.unit_cost_at_time_cents,
            sell_price_at_time_cents=draft.sell_price_at_time_cents,
        ))


def _default_rate_bps() -> int:
    return int(current_app.config.get("DEFAULT_COMMISSION_RATE_BPS", pricing_service.DEFAULT_COMMISSION_RATE_BPS))


# =============================================================================
# Create
# =============================================================================

def create_order(
    *,
    actor,
    channel: str,
    customer_name: str,
    items: list[dict],
    contact_link: str | None = None,
    phone_number: str | None = None,
    notes: str | None = None,
    region: str | None = None,
    shipping_paid_cents: int | None = None,
    discount_amount_cents: int | None = 0,
    discount_reason: str | None = None,
    rate_table: RateTable | None = None,
) -> OrderWriteResult:
    channel = (channel or "").strip().lower() if isinstance(channel, str) else ""
    if channel not in OrderChannel.ALL:
        raise UnknownChannel(f"channel must be one of: {', '.join(OrderChannel.ALL)}", field="channel")

    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise CustomerNameRequired("Customer name is required", field="customer_name")

    phone_number = (phone_number or "").strip() or None
    if channel == OrderChannel.WALKIN and not phone_number:
        raise PhoneRequired("Walk-in orders need a phone number", field="phone_number")

    region, shipping_paid_cents = _clean_shipping(channel, region, shipping_paid_cents)
    contact_link = _clean_contact_link(contact_link)

    drafts = prepare_items(items)
    subtotal = pricing_service.items_subtotal(drafts)

    discount_amount_cents = 0 if discount_amount_cents is None else discount_amount_cents
    validate_discount(discount_amount_cents, discount_reason, subtotal)

    courier_cost_cents = 0
    if channel == OrderChannel.ONLINE:
        cost = (rate_table or courier_cost_for_region)(region)
        if cost is None:
            raise CourierRateMissing(f"No courier rate configured for region {region}", field="region")
        courier_cost_cents = cost

    rate_bps = actor.commission_rate_bps
    if rate_bps is None:
        rate_bps = _default_rate_bps()

    now = utcnow()
    with atomic():
        order = Order(
            order_code=next_order_code(),
            channel=channel,
            status=INITIAL_STATUS,
            customer_name=customer_name,
            contact_link=contact_link,
            phone_number=phone_number,
            notes=(notes or "").strip() or None,
            region=region,
            shipping_paid_cents=shipping_paid_cents,
            courier_cost_cents=courier_cost_cents,
            discount_amount_cents=discount_amount_cents,
            discount_reason=normalize_reason(discount_reason),
            discount_updated_by_id=actor.id if discount_amount_cents else None,
            discount_updated_at=now if discount_amount_cents else None,
            created_by_id=actor.id,
            commission_rate_bps=rate_bps,
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)
        _add_lines(order, drafts)
        db.session.flush()

        warnings = _deduct_lines(order, drafts, actor.id)

        append_ledger_event(
            event_type="order.created",
            entity_type="order",
            entity_id=order.id,
            actor_id=actor.id,
            occurred_at=now,
            note=f"Order {order.order_code} created",
            payload={
                "order_code": order.order_code,
                "channel": channel,
                "items": [{"sku": d.sku, "quantity": d.quantity} for d in drafts],
                "discount_amount_cents": discount_amount_cents,
                "stock_warnings": warnings,
            },
        )

    return OrderWriteResult(order=order, stock_warnings=warnings)


# =============================================================================
# Lookup
# =============================================================================

def _is_code_ref(ref: str) -> bool:
    prefix = current_app.config.get("ORDER_CODE_PREFIX", "ORD-")
    return ref.upper().startswith(prefix.upper())


def load_order(ref: str, *, lock: bool = False) -> Order:
    """Order by UUID or by code (ORD-000123, case-insensitive). NotFound otherwise."""
    ref = (ref or "").strip()
    if not ref:
        raise NotFound("Order not found")

    q = db.session.query(Order)
    if _is_code_ref(ref):
        q = q.filter(func.upper(Order.order_code) == ref.upper())
    else:
        q = q.filter(Order.id == ref)
    if lock:
        q = lock_for_update(q)

    order = q.first()
    if order is None:
        raise NotFound("Order not found", details={"ref": ref})
    return order


def _staff_can_view_all() -> bool:
    return bool(current_app.config.get("STAFF_CAN_VIEW_ALL_ORDERS", True))


def load_visible_order(ref: str, actor, *, lock: bool = False) -> Order:
    """Like load_order, but staff who may not see the order get the same NotFound."""
    order = load_order(ref, lock=lock)
    if not can_view(actor, order, staff_can_view_all=_staff_can_view_all()):
        raise NotFound("Order not found", details={"ref": ref})
    return order


def serialize_order(order: Order, actor=None) -> dict:
    fin = pricing_service.compute_financials(order)
    data = order.to_dict()
    data["financials"] = fin.to_dict()
    if actor is not None:
        data["can_edit"] = can_edit(actor, order)
    return data


def get_order_detail(ref: str, actor) -> dict:
    order = load_visible_order(ref, actor)
    return {
        "order": order.to_dict(),
        "items": [item.to_dict() for item in order.items],
        "financials": pricing_service.compute_financials(order).to_dict(),
        "line_profits": [
            {
                "sku": lf.sku,
                "category": lf.category,
                "discount_share_cents": lf.discount_share_cents,
                "profit_cents": lf.profit_cents,
            }
            for lf in pricing_service.line_financials(order)
        ],
        "can_edit": can_edit(actor, order),
        "can_replace_items": can_replace_items(actor),
    }


def get_order_events(ref: str, actor) -> dict:
    """Audit trail for one order, oldest first (owner/admin)."""
    require_owner(actor, "view an order's audit trail")
    order = load_order(ref)
    events = []
    for event in list_events_for("order", order.id):
        data = event.to_dict()
        data["payload"] = json.loads(event.payload) if event.payload else None
        events.append(data)
    return {"order_code": order.order_code, "events": events}


def list_orders(actor, *, limit: int = 50, offset: int = 0) -> dict:
    max_limit = int(current_app.config.get("ORDER_LIST_MAX_LIMIT", 200))
    limit = max(1, min(limit, max_limit))
    offset = max(0, offset)

    q = db.session.query(Order)
    if not _staff_can_view_all() and not is_owner(actor):
        q = q.filter(Order.created_by_id == actor.id)

    total = q.count()
    rows = (
        q.order_by(Order.created_at.desc(), Order.order_code.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {
        "items": [serialize_order(o, actor) for o in rows],
        "count": total,
        "limit": limit,
        "offset": offset,
    }


# =============================================================================
# Edit
# =============================================================================

def update_order(
    ref: str,
    *,
    actor,
    status: str | None = None,
    discount_amount_cents: int | None = None,
    discount_reason: str | None = None,
) -> Order:
    """
    Change status and/or discount.

    None means "leave unchanged"; an empty discount_reason clears it (allowed
    only once the discount is 0). The discount rules are re-checked against
    the current item subtotal using the effective amount and reason. A request
    that changes nothing leaves updated_at and the audit trail untouched.
    """
    with atomic():
        order = load_visible_order(ref, actor, lock=True)
        require_can_edit(actor, order)

        new_status = normalize_status(status) if status is not None else order.status

        amount = order.discount_amount_cents if discount_amount_cents is None else discount_amount_cents
        reason = order.discount_reason if discount_reason is None else discount_reason
        validate_discount(amount, reason, pricing_service.items_subtotal(order.items))
        reason = normalize_reason(reason)

        now = utcnow()
        changes = {}
        if new_status != order.status:
            changes["status"] = [order.status, new_status]
            order.status = new_status

        discount_changed = False
        if amount != order.discount_amount_cents:
            changes["discount_amount_cents"] = [order.discount_amount_cents, amount]
            order.discount_amount_cents = amount
            discount_changed = True
        if reason != order.discount_reason:
            changes["discount_reason"] = [order.discount_reason, reason]
            order.discount_reason = reason
            discount_changed = True
        if discount_changed:
            order.discount_updated_by_id = actor.id
            order.discount_updated_at = now

        if not changes:
            return order

        order.updated_at = now
        db.session.flush()

        append_ledger_event(
            event_type="order.updated",
            entity_type="order",
            entity_id=order.id,
            actor_id=actor.id,
            occurred_at=now,
            note=f"Order {order.order_code} updated",
            payload={"changes": changes},
        )

    return order


def replace_items(ref: str, *, actor, items: list[dict]) -> OrderWriteResult:
    """
    Replace the whole item set of an order (owner/admin).

    Lines are re-snapshotted from the current catalog. Stock moves by
    -(new_qty - old_qty) per SKU. The existing discount must still fit the new
    subtotal; it is never clamped.
    """
    require_can_replace_items(actor)

    with atomic():
        order = load_order(ref, lock=True)
        drafts = prepare_items(items)
        validate_discount(
            order.discount_amount_cents or 0,
            order.discount_reason,
            pricing_service.items_subtotal(drafts),
        )

        old_qty = _items_by_sku(order.items)
        new_qty = _items_by_sku(drafts)
        deltas = {
            sku: -(new_qty.get(sku, 0) - old_qty.get(sku, 0))
            for sku in set(old_qty) | set(new_qty)
        }

        warnings = []
        for sku, delta in sorted(deltas.items()):
            if delta < 0:
                before = inventory_service.on_hand(sku)
                if before + delta < 0:
                    warnings.append({"sku": sku, "requested": -delta, "qty_on_hand_before": before})

        previous = [{"sku": i.sku, "quantity": i.quantity} for i in order.items]
        order.items.clear()
        db.session.flush()
        _add_lines(order, drafts)

        now = utcnow()
        order.updated_at = now
        db.session.flush()

        inventory_service.apply_deltas(
            deltas,
            reason=inventory_service.REASON_ITEM_REPLACEMENT,
            ref_order_id=order.id,
            actor_id=actor.id,
        )

        append_ledger_event(
            event_type="order.items_replaced",
            entity_type="order",
            entity_id=order.id,
            actor_id=actor.id,
            occurred_at=now,
            note=f"Order {order.order_code} items replaced",
            payload={
                "previous": previous,
                "items": [{"sku": d.sku, "quantity": d.quantity} for d in drafts],
                "stock_deltas": {sku: d for sku, d in deltas.items() if d},
            },
        )

    return OrderWriteResult(order=order, stock_warnings=warnings)
