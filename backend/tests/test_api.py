"""
HTTP API tests.

Verifies:
- Requests without a known, active actor return 401
- Domain errors map to their status codes with a stable error code
- Staff vs owner authorization through the routes
- Order create / read / patch / replace round trips
"""

import pytest

from wholesale.models import Product


def _walkin_payload(**overrides):
    payload = {
        "channel": "walkin",
        "customer_name": "Walk-in Buyer",
        "phone_number": "09171234567",
        "items": [{"sku": "SHIRT", "quantity": 2}],
    }
    payload.update(overrides)
    return payload


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("GET", "/api/orders/ORD-000001"),
            ("GET", "/api/orders/ORD-000001/events"),
            ("PATCH", "/api/orders/ORD-000001"),
            ("PUT", "/api/orders/ORD-000001/items"),
            ("GET", "/api/products"),
            ("GET", "/api/inventory"),
            ("POST", "/api/inventory/adjust"),
            ("GET", "/api/reports/commission"),
            ("GET", "/api/reports/dashboard"),
        ],
    )
    def test_requires_actor(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_unknown_actor(self, client, db_session):
        resp = client.get("/api/orders", headers={"X-Actor-Id": "nobody"})
        assert resp.status_code == 401

    def test_inactive_actor(self, client, db_session, staff_a_profile, staff_a_headers):
        staff_a_profile.is_active = False
        db_session.commit()
        resp = client.get("/api/orders", headers=staff_a_headers)
        assert resp.status_code == 401

    def test_health_is_public(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"


# =============================================================================
# ORDERS
# =============================================================================


class TestOrderRoutes:

    def test_create_and_fetch_by_code(self, client, stocked, staff_a_headers):
        resp = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers)
        assert resp.status_code == 201
        order = resp.json["order"]
        assert order["order_code"] == "ORD-000001"
        assert order["financials"]["items_profit_cents"] == 8000
        assert resp.json["stock_warnings"] == []

        resp = client.get("/api/orders/ord-000001", headers=staff_a_headers)
        assert resp.status_code == 200
        assert resp.json["order"]["id"] == order["id"]
        assert resp.json["items"][0]["sku"] == "SHIRT"

    def test_online_order_commission(self, client, stocked, rates, staff_a_headers):
        resp = client.post("/api/orders", json={
            "channel": "online",
            "customer_name": "Online Buyer",
            "region": "luzon",
            "shipping_paid_cents": 20000,
            "items": [{"sku": "MUG", "quantity": 1}],
        }, headers=staff_a_headers)
        assert resp.status_code == 201
        fin = resp.json["order"]["financials"]
        assert fin["shipping_profit_cents"] == 8000
        assert fin["commission_cents"] == 2400

    def test_backorder_warning(self, client, stocked, staff_a_headers):
        resp = client.post(
            "/api/orders",
            json=_walkin_payload(items=[{"sku": "TOTE", "quantity": 21}]),
            headers=staff_a_headers,
        )
        assert resp.status_code == 201
        assert resp.json["stock_warnings"] == [{"sku": "TOTE", "requested": 21, "qty_on_hand_before": 20}]

    @pytest.mark.parametrize(
        "overrides,code,status",
        [
            ({"channel": "carrier-pigeon"}, "UnknownChannel", 400),
            ({"customer_name": ""}, "CustomerNameRequired", 400),
            ({"phone_number": ""}, "PhoneRequired", 400),
            ({"items": []}, "NoItems", 400),
            ({"items": [{"sku": "NOPE", "quantity": 1}]}, "UnknownSku", 400),
            ({"items": [{"sku": "OLD", "quantity": 1}]}, "ProductArchived", 400),
            ({"discount_amount_cents": 100}, "DiscountReasonRequired", 400),
            ({"discount_amount_cents": -5}, "InvalidDiscount", 400),
            ({"discount_amount_cents": 50000, "discount_reason": "x"}, "DiscountExceedsSubtotal", 409),
            ({"contact_link": "ftp://x"}, "InvalidContactLink", 400),
            ({"discount_amount_cents": "12.5"}, "VALIDATION_ERROR", 400),
        ],
    )
    def test_validation_errors(self, client, stocked, staff_a_headers, overrides, code, status):
        resp = client.post("/api/orders", json=_walkin_payload(**overrides), headers=staff_a_headers)
        assert resp.status_code == status
        assert resp.json["code"] == code

    def test_non_object_body(self, client, stocked, staff_a_headers):
        resp = client.post("/api/orders", json=[1, 2], headers=staff_a_headers)
        assert resp.status_code == 400

    def test_missing_order(self, client, stocked, staff_a_headers):
        resp = client.get("/api/orders/ORD-424242", headers=staff_a_headers)
        assert resp.status_code == 404
        assert resp.json["code"] == "NotFound"

    def test_staff_b_cannot_patch_staff_a_order(self, client, stocked, staff_a_headers, staff_b_headers, owner_headers):
        created = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers).json
        ref = created["order"]["order_code"]

        resp = client.patch(f"/api/orders/{ref}", json={"status": "paid"}, headers=staff_b_headers)
        assert resp.status_code == 403
        assert resp.json["code"] == "Forbidden"

        resp = client.patch(f"/api/orders/{ref}", json={"status": "paid"}, headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["order"]["status"] == "paid"

    def test_patch_unknown_status(self, client, stocked, staff_a_headers):
        created = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers).json
        resp = client.patch(
            f"/api/orders/{created['order']['id']}", json={"status": "teleported"}, headers=staff_a_headers,
        )
        assert resp.status_code == 400
        assert resp.json["code"] == "UnknownStatus"

    def test_replace_items_owner_only(self, client, stocked, staff_a_headers, owner_headers):
        created = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers).json
        ref = created["order"]["id"]
        body = {"items": [{"sku": "MUG", "quantity": 3}]}

        resp = client.put(f"/api/orders/{ref}/items", json=body, headers=staff_a_headers)
        assert resp.status_code == 403

        resp = client.put(f"/api/orders/{ref}/items", json=body, headers=owner_headers)
        assert resp.status_code == 200
        assert [(i["sku"], i["quantity"]) for i in resp.json["items"]] == [("MUG", 3)]

        inv = client.get("/api/inventory/SHIRT", headers=owner_headers).json
        assert inv["qty_on_hand"] == 20

    def test_list_orders_paging(self, client, stocked, staff_a_headers):
        for _ in range(3):
            client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers)
        resp = client.get("/api/orders?limit=2&offset=1", headers=staff_a_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 3
        assert [o["order_code"] for o in resp.json["items"]] == ["ORD-000002", "ORD-000001"]

    def test_list_orders_bad_limit(self, client, stocked, staff_a_headers):
        resp = client.get("/api/orders?limit=abc", headers=staff_a_headers)
        assert resp.status_code == 400

    def test_create_with_qty_key(self, client, stocked, staff_a_headers):
        resp = client.post("/api/orders", json={
            "channel": "tiktok",
            "customer_name": "Ana",
            "items": [{"sku": "SHIRT", "qty": 5}],
        }, headers=staff_a_headers)
        assert resp.status_code == 201
        assert [(i["sku"], i["quantity"]) for i in resp.json["items"]] == [("SHIRT", 5)]
        assert resp.json["order"]["financials"]["items_subtotal_cents"] == 50000

        inv = client.get("/api/inventory/SHIRT", headers=staff_a_headers).json
        assert inv["qty_on_hand"] == 15

    def test_replace_with_qty_key(self, client, stocked, staff_a_headers, owner_headers):
        created = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers).json
        resp = client.put(
            f"/api/orders/{created['order']['id']}/items",
            json={"items": [{"sku": "SHIRT", "qty": 6}]},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert [(i["sku"], i["quantity"]) for i in resp.json["items"]] == [("SHIRT", 6)]
        assert client.get("/api/inventory/SHIRT", headers=owner_headers).json["qty_on_hand"] == 14

    def test_item_without_quantity_rejected(self, client, stocked, staff_a_headers):
        resp = client.post(
            "/api/orders", json=_walkin_payload(items=[{"sku": "SHIRT"}]), headers=staff_a_headers,
        )
        assert resp.status_code == 400
        assert resp.json["code"] == "InvalidQuantity"
        assert client.get("/api/inventory/SHIRT", headers=staff_a_headers).json["qty_on_hand"] == 20

    def test_order_events_owner_only(self, client, stocked, staff_a_headers, owner_headers):
        created = client.post("/api/orders", json=_walkin_payload(), headers=staff_a_headers).json
        ref = created["order"]["order_code"]

        resp = client.get(f"/api/orders/{ref}/events", headers=staff_a_headers)
        assert resp.status_code == 403

        resp = client.get(f"/api/orders/{ref}/events", headers=owner_headers)
        assert resp.status_code == 200
        assert [e["event_type"] for e in resp.json["events"]] == ["order.created"]
        assert resp.json["events"][0]["payload"]["items"] == [{"sku": "SHIRT", "quantity": 2}]


# =============================================================================
# INVENTORY / CATALOG
# =============================================================================


class TestInventoryRoutes:

    def test_staff_cannot_adjust(self, client, stocked, staff_a_headers):
        resp = client.post("/api/inventory/adjust", json={"sku": "MUG", "delta": 5}, headers=staff_a_headers)
        assert resp.status_code == 403

    def test_owner_adjusts(self, client, stocked, owner_headers):
        resp = client.post("/api/inventory/adjust", json={"sku": "MUG", "delta": -3}, headers=owner_headers)
        assert resp.status_code == 201
        assert resp.json["qty_on_hand"] == 17

    def test_zero_delta(self, client, stocked, owner_headers):
        resp = client.post("/api/inventory/adjust", json={"sku": "MUG", "delta": 0}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "InvalidAdjustment"

    def test_unknown_sku_summary(self, client, stocked, owner_headers):
        resp = client.get("/api/inventory/NOPE", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "UnknownSku"

    def test_inventory_listing(self, client, stocked, staff_a_headers):
        resp = client.get("/api/inventory", headers=staff_a_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 3

    def test_products_listing_follows_catalog_changes(self, client, db_session, stocked, staff_a_headers):
        resp = client.get("/api/products", headers=staff_a_headers)
        assert [p["sku"] for p in resp.json["items"]] == ["SHIRT", "TOTE", "MUG"]

        mug = db_session.query(Product).filter_by(sku="MUG").one()
        mug.is_active = False
        db_session.commit()

        resp = client.get("/api/products", headers=staff_a_headers)
        assert [p["sku"] for p in resp.json["items"]] == ["SHIRT", "TOTE"]


# =============================================================================
# REPORTS
# =============================================================================


class TestReportRoutes:

    def test_staff_dashboard_forbidden(self, client, db_session, staff_a_headers):
        resp = client.get("/api/reports/dashboard", headers=staff_a_headers)
        assert resp.status_code == 403

    def test_owner_dashboard(self, client, db_session, owner_headers):
        resp = client.get("/api/reports/dashboard?start=2026-01-01&end=2026-01-31", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["range"] == {"start": "2026-01-01", "end": "2026-01-31"}

    def test_commission_for_other_staff_forbidden(self, client, db_session, staff_a_headers, staff_b):
        resp = client.get(f"/api/reports/commission?actor_id={staff_b.id}", headers=staff_a_headers)
        assert resp.status_code == 403

    def test_bad_dates(self, client, db_session, owner_headers):
        resp = client.get("/api/reports/dashboard?start=2026-02-10&end=2026-02-01", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "InvalidDateRange"

        resp = client.get("/api/reports/dashboard?start=yesterday", headers=owner_headers)
        assert resp.status_code == 400

        resp = client.get("/api/reports/dashboard?start=2026-01-01garbage", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["field"] == "start"

    @pytest.mark.parametrize("path", ["/api/reports/profit-by-category", "/api/reports/summary-by-channel"])
    def test_groupings_owner_only(self, client, db_session, staff_a_headers, owner_headers, path):
        assert client.get(path, headers=staff_a_headers).status_code == 403
        assert client.get(path, headers=owner_headers).status_code == 200
