# backend/wholesale/routes/products.py
"""
Catalog listing (read-only).

Editing the catalog happens elsewhere; this route serves the cached listing
the order form picks SKUs from.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_actor
from ..services import catalog_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_actor
def list_products_route():
    try:
        include_archived = request.args.get("include_archived", "").lower() in ("1", "true", "yes")
        entries = catalog_service.list_products(active_only=not include_archived)
        return jsonify({"items": [e.to_dict() for e in entries], "count": len(entries)})

    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500
