# backend/wholesale/routes/inventory.py
"""
Inventory routes.

Reads are open to any actor. Manual adjustments are owner/admin only; the
service enforces this and answers 403 for staff.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_actor
from ..errors import LedgerError
from ..services import inventory_service
from ..services.concurrency import run_with_retry
from ..validation import coerce_int, optional_str, require_json_object, ValidationError


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_actor
def list_inventory_route():
    try:
        include_archived = request.args.get("include_archived", "").lower() in ("1", "true", "yes")
        items = inventory_service.list_inventory(include_archived=include_archived)
        return jsonify({"items": items, "count": len(items)})

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list inventory")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<sku>")
@require_actor
def inventory_summary_route(sku: str):
    try:
        return jsonify(inventory_service.get_inventory_summary(sku))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to load inventory summary")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/adjust")
@require_actor
def adjust_inventory_route():
    """
    Manual stock correction.

    Body: sku, delta (non-zero integer), reason (optional, defaults to
    manual_adjust), note (optional).
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        sku = optional_str(data, "sku")
        if not sku:
            raise ValidationError("sku is required", field="sku")
        if data.get("delta") is None:
            raise ValidationError("delta is required", field="delta")
        delta = coerce_int(data["delta"], "delta")

        result = run_with_retry(lambda: inventory_service.adjust(
            sku,
            delta,
            actor=g.actor,
            reason=optional_str(data, "reason"),
            note=optional_str(data, "note"),
        ))
        current_app.logger.info("Inventory %s adjusted by %+d (%s)", sku, delta, g.actor.id)
        return jsonify(result), 201

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return jsonify({"error": "Internal server error"}), 500
