# backend/wholesale/routes/orders.py
"""
Order routes.

All routes require a resolved actor (X-Actor-Id from the identity gateway).
Authorization beyond "is a known actor" lives in the services:
- any actor may create orders
- staff edit only orders they created; owner/admin edit any order
- only owner/admin replace an order's items
- only owner/admin read an order's audit trail (/<ref>/events)

<ref> is either the order UUID or its code (ORD-000123, case-insensitive).
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_actor
from ..errors import LedgerError
from ..services import order_service
from ..services.concurrency import run_with_retry
from ..validation import (
    optional_amount_cents,
    optional_str,
    parse_items,
    parse_paging,
    require_json_object,
)


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _write_response(result, status: int):
    order = result.order
    return jsonify({
        "order": order_service.serialize_order(order, g.actor),
        "items": [item.to_dict() for item in order.items],
        "stock_warnings": result.stock_warnings,
    }), status


@orders_bp.post("")
@require_actor
def create_order_route():
    """
    Create an order; stock is deducted immediately.

    Backorders are allowed: SKUs whose stock was short come back in
    stock_warnings with the quantity on hand before the deduction.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        kwargs = dict(
            actor=g.actor,
            channel=data.get("channel"),
            customer_name=optional_str(data, "customer_name"),
            contact_link=optional_str(data, "contact_link"),
            phone_number=optional_str(data, "phone_number"),
            notes=optional_str(data, "notes"),
            region=optional_str(data, "region"),
            shipping_paid_cents=optional_amount_cents(data, "shipping_paid_cents"),
            discount_amount_cents=optional_amount_cents(data, "discount_amount_cents"),
            discount_reason=optional_str(data, "discount_reason"),
            items=parse_items(data),
        )

        result = run_with_retry(lambda: order_service.create_order(**kwargs))
        current_app.logger.info(
            "Order %s created by %s (%d stock warnings)",
            result.order.order_code, g.actor.id, len(result.stock_warnings),
        )
        return _write_response(result, 201)

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("")
@require_actor
def list_orders_route():
    try:
        limit, offset = parse_paging(
            request.args,
            max_limit=int(current_app.config.get("ORDER_LIST_MAX_LIMIT", 200)),
        )
        return jsonify(order_service.list_orders(g.actor, limit=limit, offset=offset))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<ref>")
@require_actor
def get_order_route(ref: str):
    try:
        return jsonify(order_service.get_order_detail(ref, g.actor))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to load order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<ref>/events")
@require_actor
def order_events_route(ref: str):
    """Audit trail for an order (owner/admin)."""
    try:
        return jsonify(order_service.get_order_events(ref, g.actor))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to load order events")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.patch("/<ref>")
@require_actor
def update_order_route(ref: str):
    """
    Change status and/or discount.

    Body (all optional): status, discount_amount_cents, discount_reason.
    Omitted or null fields are left unchanged.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        status = optional_str(data, "status")
        amount = optional_amount_cents(data, "discount_amount_cents")
        reason = optional_str(data, "discount_reason")

        order = run_with_retry(lambda: order_service.update_order(
            ref,
            actor=g.actor,
            status=status,
            discount_amount_cents=amount,
            discount_reason=reason,
        ))
        current_app.logger.info("Order %s updated by %s", order.order_code, g.actor.id)
        return jsonify({"order": order_service.serialize_order(order, g.actor)})

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to update order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.put("/<ref>/items")
@require_actor
def replace_items_route(ref: str):
    """Replace the order's whole item set (owner/admin)."""
    try:
        data = require_json_object(request.get_json(silent=True))
        items = parse_items(data)

        result = run_with_retry(lambda: order_service.replace_items(ref, actor=g.actor, items=items))
        current_app.logger.info("Order %s items replaced by %s", result.order.order_code, g.actor.id)
        return _write_response(result, 200)

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to replace order items")
        return jsonify({"error": "Internal server error"}), 500
