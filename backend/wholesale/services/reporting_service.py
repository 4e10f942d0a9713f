# Overview: Read-only roll-ups over orders: commission report, owner dashboard, category and channel summaries.

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import date
from typing import Callable

from sqlalchemy import case, func

from ..extensions import db
from ..errors import Forbidden, InvalidDateRange, NotFound
from ..models import Expense, Order, OrderChannel, Payable, Profile, Receivable
from ..permissions import is_owner, require_owner
from wholesale.time_utils import day_range_bounds, default_report_range, to_utc_z
from . import pricing_service
from .order_state import OrderStatus

"""
Reporting semantics

- Date ranges are calendar dates, inclusive on both ends: an order counts when
  start 00:00 <= created_at < (end + 1 day) 00:00.
- Cancelled orders never count toward commission or dashboard totals.
- All profit figures come from pricing_service; nothing is re-derived here.
"""

CLOSED_STATUS = "closed"


@dataclass(frozen=True)
class AuxTotals:
    expenses_total_cents: int
    receivables_outstanding_cents: int
    payables_outstanding_cents: int


# Any callable (start, end) -> AuxTotals
AuxTotalsProvider = Callable[[date, date], AuxTotals]


def resolve_range(start: date | None, end: date | None, *, today: date | None = None) -> tuple[date, date]:
    default_start, default_end = default_report_range(today)
    start = start or default_start
    end = end or default_end
    if start > end:
        raise InvalidDateRange(
            "start must be on or before end",
            field="start",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )
    return start, end


def _orders_in_range(start: date, end: date, *, created_by_id: str | None = None, channel: str | None = None):
    lower, upper = day_range_bounds(start, end)
    q = (
        db.session.query(Order)
        .filter(Order.created_at >= lower, Order.created_at < upper)
        .filter(Order.status != OrderStatus.CANCELLED)
    )
    if created_by_id is not None:
        q = q.filter(Order.created_by_id == created_by_id)
    if channel is not None:
        q = q.filter(Order.channel == channel)
    return q.order_by(Order.created_at.asc(), Order.order_code.asc()).all()


def _range_dict(start: date, end: date) -> dict:
    return {"start": start.isoformat(), "end": end.isoformat()}


# =============================================================================
# Commission
# =============================================================================

def commission_report(
    actor,
    *,
    start: date | None = None,
    end: date | None = None,
    target_actor_id: str | None = None,
) -> dict:
    """
    Online orders created by one actor in the range, with shipping profit and
    commission per order. Staff may only request their own report.
    """
    target_id = target_actor_id or actor.id
    if target_id != actor.id and not is_owner(actor):
        raise Forbidden("You can only view your own commission report")

    start, end = resolve_range(start, end)

    profile = db.session.get(Profile, target_id)
    if profile is None:
        raise NotFound("Profile not found", details={"actor_id": target_id})

    rows = []
    total = 0
    for order in _orders_in_range(start, end, created_by_id=target_id, channel=OrderChannel.ONLINE):
        fin = pricing_service.compute_financials(order)
        total += fin.commission_cents
        rows.append({
            "order_id": order.id,
            "order_code": order.order_code,
            "created_at": to_utc_z(order.created_at),
            "region": order.region,
            "status": order.status,
            "shipping_paid_cents": fin.shipping_paid_cents,
            "courier_cost_cents": fin.courier_cost_cents,
            "shipping_profit_cents": fin.shipping_profit_cents,
            "commission_rate_bps": fin.commission_rate_bps,
            "commission_cents": fin.commission_cents,
        })

    return {
        "actor_id": profile.id,
        "display_name": profile.display_name,
        "range": _range_dict(start, end),
        "rows": rows,
        "order_count": len(rows),
        "total_commission_cents": total,
    }


# =============================================================================
# Auxiliary ledgers
# =============================================================================

def db_aux_totals(start: date, end: date) -> AuxTotals:
    """Default provider: sums the expense/receivable/payable tables."""
    expenses = (
        db.session.query(func.coalesce(func.sum(Expense.amount_cents), 0))
        .filter(Expense.expense_date >= start, Expense.expense_date <= end)
        .scalar()
    )

    balance = Receivable.amount_due_cents - Receivable.amount_paid_cents
    outstanding_expr = case((balance > 0, balance), else_=0)
    receivables = (
        db.session.query(func.coalesce(func.sum(outstanding_expr), 0))
        .filter(Receivable.status != CLOSED_STATUS)
        .scalar()
    )

    payables = (
        db.session.query(func.coalesce(func.sum(Payable.amount_cents), 0))
        .filter(Payable.status != CLOSED_STATUS)
        .scalar()
    )

    return AuxTotals(
        expenses_total_cents=int(expenses or 0),
        receivables_outstanding_cents=int(receivables or 0),
        payables_outstanding_cents=int(payables or 0),
    )


# =============================================================================
# Dashboard
# =============================================================================

def dashboard_summary(
    actor,
    *,
    start: date | None = None,
    end: date | None = None,
    aux_totals: AuxTotalsProvider | None = None,
) -> dict:
    require_owner(actor, "view the dashboard")
    start, end = resolve_range(start, end)

    items_profit = 0
    shipping_profit = 0
    commission_total = 0
    orders = _orders_in_range(start, end)
    for order in orders:
        fin = pricing_service.compute_financials(order)
        items_profit += fin.items_profit_cents
        shipping_profit += fin.shipping_profit_cents
        commission_total += fin.commission_cents

    order_profit = items_profit + shipping_profit - commission_total
    aux = (aux_totals or db_aux_totals)(start, end)

    return {
        "range": _range_dict(start, end),
        "order_count": len(orders),
        "items_profit_cents": items_profit,
        "shipping_profit_cents": shipping_profit,
        "commission_total_cents": commission_total,
        "order_profit_cents": order_profit,
        "expenses_total_cents": aux.expenses_total_cents,
        "net_after_expenses_cents": order_profit - aux.expenses_total_cents,
        "receivables_outstanding_cents": aux.receivables_outstanding_cents,
        "payables_outstanding_cents": aux.payables_outstanding_cents,
    }


def profit_by_category(actor, *, start: date | None = None, end: date | None = None) -> dict:
    """Item profit grouped by the category snapshotted on each line."""
    require_owner(actor, "view profit by category")
    start, end = resolve_range(start, end)

    groups: dict[str, dict] = {}
    for order in _orders_in_range(start, end):
        for lf in pricing_service.line_financials(order):
            g = groups.setdefault(lf.category, {
                "category": lf.category,
                "quantity": 0,
                "subtotal_cents": 0,
                "discount_cents": 0,
                "cogs_cents": 0,
                "profit_cents": 0,
            })
            g["quantity"] += lf.quantity
            g["subtotal_cents"] += lf.subtotal_cents
            g["discount_cents"] += lf.discount_share_cents
            g["cogs_cents"] += lf.cogs_cents
            g["profit_cents"] += lf.profit_cents

    rows = [groups[k] for k in sorted(groups)]
    return {
        "range": _range_dict(start, end),
        "rows": rows,
        "total_profit_cents": sum(r["profit_cents"] for r in rows),
    }


def summary_by_channel(actor, *, start: date | None = None, end: date | None = None) -> dict:
    require_owner(actor, "view the channel summary")
    start, end = resolve_range(start, end)

    fields = (
        "items_subtotal_cents",
        "discount_cents",
        "items_profit_cents",
        "shipping_profit_cents",
        "commission_cents",
        "net_profit_cents",
    )
    groups = {
        channel: {"channel": channel, "order_count": 0, **{f: 0 for f in fields}}
        for channel in OrderChannel.ALL
    }
    for order in _orders_in_range(start, end):
        fin = asdict(pricing_service.compute_financials(order))
        g = groups[order.channel]
        g["order_count"] += 1
        for f in fields:
            g[f] += fin[f]

    return {
        "range": _range_dict(start, end),
        "rows": [groups[c] for c in OrderChannel.ALL],
    }
