# backend/wholesale/routes/reports.py
"""
Reporting routes.

Query params: start, end (YYYY-MM-DD, inclusive; default first of the month
through today). Commission also takes actor_id (owner/admin only for anyone
but yourself). Everything else is owner/admin only.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_actor
from ..errors import LedgerError
from ..services import reporting_service
from ..validation import parse_date_param


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _range_args() -> dict:
    return {
        "start": parse_date_param(request.args.get("start"), "start"),
        "end": parse_date_param(request.args.get("end"), "end"),
    }


@reports_bp.get("/commission")
@require_actor
def commission_report_route():
    try:
        report = reporting_service.commission_report(
            g.actor,
            target_actor_id=(request.args.get("actor_id") or "").strip() or None,
            **_range_args(),
        )
        return jsonify(report)

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to build commission report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/dashboard")
@require_actor
def dashboard_route():
    try:
        return jsonify(reporting_service.dashboard_summary(g.actor, **_range_args()))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to build dashboard summary")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/profit-by-category")
@require_actor
def profit_by_category_route():
    try:
        return jsonify(reporting_service.profit_by_category(g.actor, **_range_args()))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to build profit by category report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/summary-by-channel")
@require_actor
def summary_by_channel_route():
    try:
        return jsonify(reporting_service.summary_by_channel(g.actor, **_range_args()))

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to build channel summary")
        return jsonify({"error": "Internal server error"}), 500
