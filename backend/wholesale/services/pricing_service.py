# Overview: Pure derivation of an order's financial breakdown (subtotals, profit, commission).

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable

from flask import current_app, has_app_context

from ..models import Order

"""
Profit invariants (authoritative)

- Everything here is derived from the order's stored inputs and its line
  snapshots on every read; nothing computed here is persisted.
- items_after_discount = max(items_subtotal - discount, 0)
- shipping profit and commission exist only for online orders; shipping
  profit is floored at 0.
- commission = shipping_profit * rate, rounded half-up to the centavo.
"""

BPS_DENOMINATOR = 10_000
DEFAULT_COMMISSION_RATE_BPS = 3000


@dataclass(frozen=True)
class OrderFinancials:
    items_subtotal_cents: int
    items_cogs_cents: int
    discount_cents: int
    items_after_discount_cents: int
    items_profit_cents: int
    shipping_paid_cents: int
    courier_cost_cents: int
    shipping_profit_cents: int
    gross_profit_cents: int
    commission_rate_bps: int
    commission_cents: int
    net_profit_cents: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LineFinancials:
    sku: str
    category: str
    quantity: int
    subtotal_cents: int
    cogs_cents: int
    discount_share_cents: int
    profit_cents: int


def items_subtotal(lines: Iterable) -> int:
    """Σ quantity × sell_price_at_time over order lines (or anything shaped like one)."""
    return sum(line.quantity * line.sell_price_at_time_cents for line in lines)


def items_cogs(lines: Iterable) -> int:
    return sum(line.quantity * line.unit_cost_at_time_cents for line in lines)


def commission_for(shipping_profit_cents: int, rate_bps: int) -> int:
    """Half-up rounding to the nearest centavo (shipping profit is never negative)."""
    if shipping_profit_cents <= 0 or rate_bps <= 0:
        return 0
    return (shipping_profit_cents * rate_bps + BPS_DENOMINATOR // 2) // BPS_DENOMINATOR


def _configured_default_rate() -> int:
    if has_app_context():
        return int(current_app.config.get("DEFAULT_COMMISSION_RATE_BPS", DEFAULT_COMMISSION_RATE_BPS))
    return DEFAULT_COMMISSION_RATE_BPS


def effective_rate_bps(order: Order) -> int:
    """Order snapshot, else creator's current rate, else the configured default."""
    if order.commission_rate_bps is not None:
        return order.commission_rate_bps
    if order.created_by is not None and order.created_by.commission_rate_bps is not None:
        return order.created_by.commission_rate_bps
    return _configured_default_rate()


def compute_financials(order: Order) -> OrderFinancials:
    lines = list(order.items)
    subtotal = items_subtotal(lines)
    cogs = items_cogs(lines)
    discount = order.discount_amount_cents or 0

    after_discount = max(subtotal - discount, 0)
    items_profit = after_discount - cogs

    online = order.is_online
    shipping_paid = (order.shipping_paid_cents or 0) if online else 0
    courier_cost = (order.courier_cost_cents or 0) if online else 0
    shipping_profit = max(shipping_paid - courier_cost, 0) if online else 0

    rate = effective_rate_bps(order)
    commission = commission_for(shipping_profit, rate) if online else 0

    gross = items_profit + shipping_profit
    return OrderFinancials(
        items_subtotal_cents=subtotal,
        items_cogs_cents=cogs,
        discount_cents=discount,
        items_after_discount_cents=after_discount,
        items_profit_cents=items_profit,
        shipping_paid_cents=shipping_paid,
        courier_cost_cents=courier_cost,
        shipping_profit_cents=shipping_profit,
        gross_profit_cents=gross,
        commission_rate_bps=rate,
        commission_cents=commission,
        net_profit_cents=gross - commission,
    )


def allocate_discount(line_subtotals: list[int], discount_cents: int) -> list[int]:
    """
    Split a discount across lines in proportion to line subtotal.

    Largest-remainder method: shares sum exactly to min(discount, total);
    leftover centavos go to the largest remainders, earliest line first on ties.
    """
    total = sum(line_subtotals)
    effective = min(max(discount_cents, 0), total)
    if total <= 0 or effective == 0:
        return [0] * len(line_subtotals)

    shares = []
    remainders = []
    for idx, sub in enumerate(line_subtotals):
        share, rem = divmod(effective * sub, total)
        shares.append(share)
        remainders.append((rem, idx))

    leftover = effective - sum(shares)
    for _, idx in sorted(remainders, key=lambda r: (-r[0], r[1]))[:leftover]:
        shares[idx] += 1
    return shares


def line_financials(order: Order) -> list[LineFinancials]:
    lines = list(order.items)
    subtotals = [line.quantity * line.sell_price_at_time_cents for line in lines]
    shares = allocate_discount(subtotals, order.discount_amount_cents or 0)

    result = []
    for line, sub, share in zip(lines, subtotals, shares):
        cogs = line.quantity * line.unit_cost_at_time_cents
        result.append(LineFinancials(
            sku=line.sku,
            category=line.category_at_time,
            quantity=line.quantity,
            subtotal_cents=sub,
            cogs_cents=cogs,
            discount_share_cents=share,
            profit_cents=sub - share - cogs,
        ))
    return result
