"""
Tests for catalog management: categories, products and addons.
"""


class TestCategories:

    async def test_create_appends_to_display_order(self, client, seed_catalog):
        response = await client.post("/api/categories", json={"name": "Desserts"})
        assert response.status_code == 201
        assert response.json()["display_order"] == 3

    async def test_first_category_starts_at_one(self, client):
        response = await client.post("/api/categories", json={"name": "Pizzas"})
        assert response.json()["display_order"] == 1

    async def test_update(self, client, seed_catalog):
        category = seed_catalog["categories"]["drinks"]
        response = await client.put(f"/api/categories/{category.id}", json={"name": "Beverages"})
        assert response.status_code == 200
        assert response.json()["name"] == "Beverages"

    async def test_move_swaps_with_neighbour(self, client, seed_catalog):
        drinks = seed_catalog["categories"]["drinks"]

        response = await client.post(f"/api/categories/{drinks.id}/move", json={"direction": "up"})
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Drinks", "Burgers"]

    async def test_move_past_the_end_is_noop(self, client, seed_catalog):
        drinks = seed_catalog["categories"]["drinks"]

        response = await client.post(f"/api/categories/{drinks.id}/move", json={"direction": "down"})
        assert [c["name"] for c in response.json()] == ["Burgers", "Drinks"]

    async def test_move_with_equal_orders_renumbers(self, client):
        for name in ["A", "B", "C"]:
            await client.post("/api/categories", json={"name": name, "display_order": 0})
        categories = (await client.get("/api/categories")).json()

        response = await client.post(f"/api/categories/{categories[2]['id']}/move", json={"direction": "up"})
        data = response.json()
        assert [c["name"] for c in data] == ["A", "C", "B"]
        assert [c["display_order"] for c in data] == [1, 2, 3]

    async def test_delete_refused_with_products(self, client, seed_catalog):
        category = seed_catalog["categories"]["drinks"]
        response = await client.delete(f"/api/categories/{category.id}")
        assert response.status_code == 400
        assert response.json()["error"] == "Category has products"

    async def test_delete_empty_category(self, client):
        category = (await client.post("/api/categories", json={"name": "Empty"})).json()
        assert (await client.delete(f"/api/categories/{category['id']}")).status_code == 200
        assert (await client.get("/api/categories")).json() == []


class TestProducts:

    async def test_list_and_filter(self, client, seed_catalog):
        burgers = seed_catalog["categories"]["burgers"]

        everything = (await client.get("/api/products")).json()
        assert [p["name"] for p in everything] == ["Classic Burger", "Soda", "Veggie Burger"]

        only_burgers = (await client.get("/api/products", params={"category_id": burgers.id})).json()
        assert {p["category_name"] for p in only_burgers} == {"Burgers"}

    async def test_create_with_addons(self, client, seed_catalog):
        burgers = seed_catalog["categories"]["burgers"]
        cheese = seed_catalog["addons"]["cheese"]

        response = await client.post("/api/products", json={
            "name": "Double Burger",
            "price": 32.0,
            "category_id": burgers.id,
            "addon_ids": [cheese.id],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["addon_ids"] == [cheese.id]
        assert data["category_name"] == "Burgers"
        assert data["available"] is True

    async def test_create_with_unknown_category(self, client):
        response = await client.post("/api/products", json={"name": "X", "price": 1.0, "category_id": 99})
        assert response.status_code == 404

    async def test_update_replaces_addon_links(self, client, seed_catalog):
        burger = seed_catalog["products"]["burger"]
        bacon = seed_catalog["addons"]["bacon"]

        response = await client.put(f"/api/products/{burger.id}", json={"addon_ids": [bacon.id]})
        assert response.json()["addon_ids"] == [bacon.id]

        # Without addon_ids the links are kept
        response = await client.put(f"/api/products/{burger.id}", json={"price": 27.0})
        assert response.json()["addon_ids"] == [bacon.id]
        assert response.json()["price"] == 27.0

    async def test_toggle_availability(self, client, seed_catalog):
        soda = seed_catalog["products"]["soda"]

        response = await client.post(f"/api/products/{soda.id}/toggle")
        assert response.json()["available"] is False

        unavailable = (await client.get("/api/products", params={"available": False})).json()
        assert [p["name"] for p in unavailable] == ["Soda"]

    async def test_delete_removes_addon_links(self, client, seed_catalog):
        burger = seed_catalog["products"]["burger"]
        cheese = seed_catalog["addons"]["cheese"]

        assert (await client.delete(f"/api/products/{burger.id}")).status_code == 200
        assert (await client.get(f"/api/products/{burger.id}")).status_code == 404
        # The addon is free to go now
        assert (await client.delete(f"/api/addons/{cheese.id}")).status_code == 200

    async def test_delete_ordered_product_keeps_order_history(self, client, make_order, seed_catalog):
        burger = seed_catalog["products"]["burger"]
        order = await make_order()

        assert (await client.delete(f"/api/products/{burger.id}")).status_code == 200

        item = (await client.get(f"/api/orders/{order['id']}")).json()["items"][0]
        assert item["product_id"] is None
        assert item["product_name"] == "Removed product"
        assert item["total_price"] == 50.0


class TestAddons:

    async def test_list_by_name(self, client, seed_catalog):
        data = (await client.get("/api/addons")).json()
        assert [a["name"] for a in data] == ["Bacon", "Extra cheese"]

    async def test_crud(self, client):
        response = await client.post("/api/addons", json={"name": "Onion rings", "price": 5.0, "max_options": 2})
        assert response.status_code == 201
        addon = response.json()

        response = await client.put(f"/api/addons/{addon['id']}", json={"available": False})
        assert response.json()["available"] is False

        assert (await client.delete(f"/api/addons/{addon['id']}")).status_code == 200
        assert (await client.get(f"/api/addons/{addon['id']}")).status_code == 404

    async def test_delete_ordered_addon_keeps_order_history(self, client, make_order, seed_catalog):
        burger = seed_catalog["products"]["burger"]
        bacon = seed_catalog["addons"]["bacon"]
        order = await make_order(items=[{
            "product_id": burger.id,
            "quantity": 1,
            "addons": [{"addon_id": bacon.id}],
        }])

        assert (await client.delete(f"/api/addons/{bacon.id}")).status_code == 200

        item = (await client.get(f"/api/orders/{order['id']}")).json()["items"][0]
        assert item["addons"][0]["addon_id"] is None
        assert item["addons"][0]["name"] == "Removed addon"
        assert item["unit_price"] == 29.5

    async def test_linked_addon_cannot_be_deleted(self, client, seed_catalog):
        cheese = seed_catalog["addons"]["cheese"]
        response = await client.delete(f"/api/addons/{cheese.id}")
        assert response.status_code == 400
        assert response.json()["error"] == "Addon is in use"

    async def test_product_addons_are_linked_plus_global(self, client, seed_catalog):
        products = seed_catalog["products"]

        burger = (await client.get(f"/api/products/{products['burger'].id}/addons")).json()
        assert [a["name"] for a in burger] == ["Bacon", "Extra cheese"]

        soda = (await client.get(f"/api/products/{products['soda'].id}/addons")).json()
        assert [a["name"] for a in soda] == ["Bacon"]

    async def test_unavailable_addons_are_not_offered(self, client, seed_catalog):
        bacon = seed_catalog["addons"]["bacon"]
        await client.put(f"/api/addons/{bacon.id}", json={"available": False})

        soda = (await client.get(f"/api/products/{seed_catalog['products']['soda'].id}/addons")).json()
        assert soda == []
