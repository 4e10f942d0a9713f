"""
Profit derivation tests.

Verifies:
- Item subtotal / COGS / discount arithmetic
- Shipping profit and commission only for online orders
- Commission rate precedence and half-up rounding
- Discount allocation across lines sums exactly
"""

import pytest

from wholesale.models import Order, OrderItem
from wholesale.services import pricing_service


def _order(channel="walkin", items=(), discount=0, shipping_paid=0, courier=0, rate_bps=3000):
    order = Order(
        channel=channel,
        customer_name="Test",
        discount_amount_cents=discount,
        shipping_paid_cents=shipping_paid,
        courier_cost_cents=courier,
        commission_rate_bps=rate_bps,
    )
    for pos, (sku, category, qty, cost, price) in enumerate(items):
        order.items.append(OrderItem(
            position=pos,
            sku=sku,
            quantity=qty,
            category_at_time=category,
            unit_cost_at_time_cents=cost,
            sell_price_at_time_cents=price,
        ))
    return order


class TestItemsProfit:

    def test_discount_reduces_item_profit(self):
        # 2 x (sell 100, cost 60), discount 50
        order = _order(items=[("SHIRT", "apparel", 2, 6000, 10000)], discount=5000)
        fin = pricing_service.compute_financials(order)

        assert fin.items_subtotal_cents == 20000
        assert fin.items_after_discount_cents == 15000
        assert fin.items_cogs_cents == 12000
        assert fin.items_profit_cents == 3000

    def test_after_discount_is_exact_subtraction(self):
        order = _order(items=[("A", "x", 3, 100, 333), ("B", "y", 1, 50, 77)], discount=1000)
        fin = pricing_service.compute_financials(order)
        assert fin.items_after_discount_cents == fin.items_subtotal_cents - 1000

    def test_after_discount_floors_at_zero(self):
        order = _order(items=[("A", "x", 1, 100, 500)], discount=900)
        fin = pricing_service.compute_financials(order)
        assert fin.items_after_discount_cents == 0
        assert fin.items_profit_cents == -100

    def test_missing_discount_treated_as_zero(self):
        order = _order(items=[("A", "x", 1, 100, 500)], discount=None)
        assert pricing_service.compute_financials(order).items_profit_cents == 400


class TestShippingAndCommission:

    def test_online_shipping_profit_and_commission(self):
        # shipping 200, courier 120 -> profit 80, commission 24 at 30%
        order = _order(channel="online", items=[("A", "x", 1, 100, 500)],
                       shipping_paid=20000, courier=12000)
        fin = pricing_service.compute_financials(order)

        assert order.is_online
        assert fin.shipping_profit_cents == 8000
        assert fin.commission_cents == 2400
        assert fin.gross_profit_cents == fin.items_profit_cents + 8000
        assert fin.net_profit_cents == fin.gross_profit_cents - 2400

    def test_shipping_loss_floors_at_zero(self):
        order = _order(channel="online", shipping_paid=10000, courier=15000)
        fin = pricing_service.compute_financials(order)
        assert fin.shipping_profit_cents == 0
        assert fin.commission_cents == 0

    @pytest.mark.parametrize("channel", ["walkin", "lalamove", "tiktok"])
    def test_non_online_has_no_shipping_or_commission(self, channel):
        order = _order(channel=channel, items=[("A", "x", 1, 100, 500)],
                       shipping_paid=20000, courier=12000)
        fin = pricing_service.compute_financials(order)
        assert fin.shipping_profit_cents == 0
        assert fin.commission_cents == 0
        assert not order.is_online

    def test_commission_rounds_half_up(self):
        assert pricing_service.commission_for(5, 3000) == 2        # 1.5 -> 2
        assert pricing_service.commission_for(1, 3000) == 0        # 0.3 -> 0
        assert pricing_service.commission_for(8000, 3000) == 2400
        assert pricing_service.commission_for(333, 2500) == 83     # 83.25 -> 83

    def test_snapshot_rate_wins(self):
        order = _order(channel="online", shipping_paid=10000, courier=0, rate_bps=1000)
        assert pricing_service.compute_financials(order).commission_cents == 1000

    def test_missing_snapshot_falls_back_to_configured_default(self, app):
        order = _order(channel="online", shipping_paid=10000, courier=0, rate_bps=None)
        fin = pricing_service.compute_financials(order)
        assert fin.commission_rate_bps == app.config["DEFAULT_COMMISSION_RATE_BPS"]


class TestDiscountAllocation:

    def test_allocation_sums_exactly(self):
        shares = pricing_service.allocate_discount([10000, 10000, 10000], 100)
        assert sum(shares) == 100
        assert shares == [34, 33, 33]

    def test_allocation_is_proportional(self):
        assert pricing_service.allocate_discount([30000, 10000], 4000) == [3000, 1000]

    def test_allocation_capped_at_total(self):
        assert pricing_service.allocate_discount([100, 300], 1000) == [100, 300]

    def test_no_discount(self):
        assert pricing_service.allocate_discount([100, 300], 0) == [0, 0]
        assert pricing_service.allocate_discount([], 500) == []

    def test_line_profits_sum_to_items_profit(self):
        order = _order(
            items=[("A", "x", 3, 100, 333), ("B", "y", 7, 20, 91), ("C", "x", 1, 999, 1500)],
            discount=1001,
        )
        fin = pricing_service.compute_financials(order)
        lines = pricing_service.line_financials(order)
        assert sum(lf.profit_cents for lf in lines) == fin.items_profit_cents
        assert sum(lf.discount_share_cents for lf in lines) == 1001
