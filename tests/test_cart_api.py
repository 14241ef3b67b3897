MISSING_ID = "0123456789abcdef01234567"
USER = {"X-User-Id": "user-1"}


def _add(client, product_id, quantity=None):
    payload = {"productId": product_id}
    if quantity is not None:
        payload["quantity"] = quantity
    return client.post("/api/cart", json=payload, headers=USER)


class TestCart:
    """Tests for /api/cart."""

    def test_requires_user(self, client):
        assert client.get("/api/cart").status_code == 401

    def test_empty_cart_is_created(self, client):
        data = client.get("/api/cart", headers=USER).json()["data"]

        assert data["items"] == []
        assert data["count"] == 0
        assert data["userId"] == "user-1"

    def test_add_item(self, client, create_product):
        product = create_product("Ring A", price=150, stock=5)

        response = _add(client, product["id"], 2)

        assert response.status_code == 200
        assert response.json()["message"] == "Product added to cart"
        data = response.json()["data"]
        assert data["count"] == 1
        assert data["items"][0]["quantity"] == 2
        assert data["items"][0]["product"]["sku"] == product["sku"]

    def test_add_existing_increments(self, client, create_product):
        product = create_product("Ring A", stock=5)
        _add(client, product["id"])

        data = _add(client, product["id"], 2).json()["data"]

        assert data["count"] == 1
        assert data["items"][0]["quantity"] == 3

    def test_add_validation(self, client, create_product):
        product = create_product("Ring A", stock=5)
        hidden = create_product("Ring B", stock=5, isActive=False)

        cases = [
            (_add(client, "bad"), 400, "Valid product ID is required"),
            (_add(client, product["id"], 0), 400, "Quantity must be at least 1"),
            (_add(client, product["id"], "2"), 400, "Quantity must be at least 1"),
            (_add(client, MISSING_ID), 404, "Product not found"),
            (_add(client, hidden["id"]), 400, "Product is not available"),
            (_add(client, product["id"], 6), 400, "Only 5 items available in stock"),
        ]

        for response, status, message in cases:
            assert response.status_code == status
            assert response.json()["message"] == message

    def test_update_quantity(self, client, create_product):
        product = create_product("Ring A", stock=5)
        _add(client, product["id"])

        response = client.put(f"/api/cart/{product['id']}", json={"quantity": 4}, headers=USER)

        assert response.status_code == 200
        assert response.json()["message"] == "Cart updated successfully"
        assert response.json()["data"]["items"][0]["quantity"] == 4

    def test_update_errors(self, client, create_product):
        product = create_product("Ring A", stock=5)
        other = create_product("Ring B", stock=5)

        no_cart = client.put(f"/api/cart/{product['id']}", json={"quantity": 1}, headers=USER)
        _add(client, product["id"])
        no_item = client.put(f"/api/cart/{other['id']}", json={"quantity": 1}, headers=USER)
        too_many = client.put(f"/api/cart/{product['id']}", json={"quantity": 9}, headers=USER)

        assert no_cart.status_code == 404
        assert no_cart.json()["message"] == "Cart not found"
        assert no_item.status_code == 404
        assert no_item.json()["message"] == "Item not found in cart"
        assert too_many.status_code == 400

    def test_remove_item(self, client, create_product):
        product = create_product("Ring A", stock=5)
        _add(client, product["id"])

        removed = client.delete(f"/api/cart/{product['id']}", headers=USER)
        again = client.delete(f"/api/cart/{product['id']}", headers=USER)

        assert removed.json()["message"] == "Item removed from cart"
        assert again.status_code == 404

    def test_clear(self, client, create_product):
        product = create_product("Ring A", stock=5)

        assert client.delete("/api/cart", headers=USER).status_code == 404

        _add(client, product["id"])
        cleared = client.delete("/api/cart", headers=USER)

        assert cleared.json()["message"] == "Cart cleared successfully"
        assert client.get("/api/cart", headers=USER).json()["data"]["count"] == 0
