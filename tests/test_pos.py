"""
Tests for the point-of-sale checkout.
"""

from restaurant_admin.models import OrderStatus, OrderType, PaymentStatus
from restaurant_admin.services import orders as order_service


class TestPosCheckout:

    async def test_checkout(self, client, db_session, seed_catalog, seed_payment_methods):
        products, addons = seed_catalog["products"], seed_catalog["addons"]
        pix = seed_payment_methods["pix"]

        response = await client.post("/api/pos/checkout", json={
            "items": [
                {"product_id": products["burger"].id, "quantity": 1,
                 "addons": [{"addon_id": addons["bacon"].id}]},
                {"product_id": products["soda"].id, "quantity": 2},
            ],
            "payment_method_id": pix.id,
            "tax_percentage": 10,
            "discount": 1.5,
        })
        assert response.status_code == 201, response.text
        data = response.json()

        # 29.50 + 12.00
        assert data["subtotal"] == 41.5
        assert data["tax"] == 4.15
        assert data["discount"] == 1.5
        assert data["total"] == 44.15
        assert data["number"] == "000001"

        order = await order_service.get_order(db_session, data["order_id"])
        assert order.order_type == OrderType.INSTORE
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_method == str(pix.id)
        assert order.customer.name == "Walk-in customer"

    async def test_empty_cart(self, client, seed_payment_methods):
        response = await client.post("/api/pos/checkout", json={
            "items": [], "payment_method_id": seed_payment_methods["pix"].id,
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Cart is empty"

    async def test_payment_method_required(self, client, seed_catalog):
        response = await client.post("/api/pos/checkout", json={
            "items": [{"product_id": seed_catalog["products"]["soda"].id, "quantity": 1}],
        })
        assert response.status_code == 400

    async def test_disabled_payment_method(self, client, seed_catalog, seed_payment_methods):
        response = await client.post("/api/pos/checkout", json={
            "items": [{"product_id": seed_catalog["products"]["soda"].id, "quantity": 1}],
            "payment_method_id": seed_payment_methods["voucher"].id,
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Payment method unavailable"

    async def test_unknown_addon_rejected(self, client, seed_catalog, seed_payment_methods):
        response = await client.post("/api/pos/checkout", json={
            "items": [{"product_id": seed_catalog["products"]["soda"].id, "quantity": 1,
                       "addons": [{"addon_id": 999}]}],
            "payment_method_id": seed_payment_methods["pix"].id,
        })
        assert response.status_code == 404

    async def test_lists_only_available_products_and_enabled_methods(
        self, client, db_session, seed_catalog, seed_payment_methods
    ):
        seed_catalog["products"]["veggie"].available = False
        await db_session.commit()

        products = (await client.get("/api/pos/products")).json()
        assert [p["name"] for p in products] == ["Classic Burger", "Soda"]

        methods = (await client.get("/api/pos/payment-methods")).json()
        assert [m["name"] for m in methods] == ["PIX", "Credit card"]
