"""Integration tests for the cart endpoints."""

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


def _add(client, product_id, quantity=1, headers=USER, **selection):
    return client.post("/cart/add", json={"productId": product_id, "quantity": quantity, **selection}, headers=headers)


class TestAuthentication:
    def test_missing_user_header(self, client):
        response = client.get("/cart")

        assert response.status_code == 401
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "Authentication required"


class TestGetCart:
    def test_new_user_gets_empty_cart(self, client):
        response = client.get("/cart", headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["items"] == []
        assert body["data"]["totalPrice"] == 0.0
        assert body["data"]["userId"] == "user-1"


class TestAddToCart:
    def test_add_returns_cart_with_product_summary(self, client, make_product):
        product = make_product(
            name="Basic Tee",
            price=10.0,
            sale_price=8.0,
            is_sale=True,
            stock=4,
            sizes=["M"],
            images=["https://cdn.example.com/tee.jpg"],
        )

        response = _add(client, product.id, quantity=2, selectedSize="M")

        assert response.status_code == 200
        cart = response.json()["data"]
        assert cart["totalPrice"] == 20.0
        item = cart["items"][0]
        assert item["quantity"] == 2
        assert item["selectedSize"] == "M"
        assert item["product"] == {
            "id": product.id,
            "name": "Basic Tee",
            "price": 10.0,
            "salePrice": 8.0,
            "isSale": True,
            "stock": 4,
            "image": "https://cdn.example.com/tee.jpg",
        }

    def test_snake_case_body_is_accepted(self, client, make_product):
        product = make_product()
        response = client.post("/cart/add", json={"product_id": product.id, "quantity": 1}, headers=USER)
        assert response.status_code == 200

    def test_unknown_product(self, client):
        response = _add(client, "missing")

        assert response.status_code == 404
        assert response.json()["status"] == "error"
        assert response.json()["message"] == "Product missing does not exist"
        assert response.json()["data"] == {"product_id": ["Product missing does not exist"]}

    def test_invalid_variant(self, client, make_product):
        product = make_product(colors=["Black"])

        response = _add(client, product.id, selectedColor="Orange")

        assert response.status_code == 400
        assert "selected_color" in response.json()["data"]

    def test_zero_quantity(self, client, make_product):
        product = make_product()
        assert _add(client, product.id, quantity=0).status_code == 400


class TestItemEndpoints:
    def _item_id(self, client, make_product):
        product = make_product(price=5.0)
        return _add(client, product.id).json()["data"]["items"][0]["id"]

    def test_update_quantity(self, client, make_product):
        item_id = self._item_id(client, make_product)

        response = client.put(f"/cart/{item_id}", json={"quantity": 3}, headers=USER)

        assert response.status_code == 200
        assert response.json()["data"]["totalPrice"] == 15.0

    def test_update_non_positive_quantity(self, client, make_product):
        item_id = self._item_id(client, make_product)
        response = client.put(f"/cart/{item_id}", json={"quantity": -1}, headers=USER)
        assert response.status_code == 400

    def test_update_other_users_item(self, client, make_product):
        item_id = self._item_id(client, make_product)
        response = client.put(f"/cart/{item_id}", json={"quantity": 3}, headers=OTHER_USER)
        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"

    def test_remove_item(self, client, make_product):
        item_id = self._item_id(client, make_product)

        response = client.delete(f"/cart/{item_id}", headers=USER)

        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_clear(self, client, make_product):
        self._item_id(client, make_product)

        response = client.delete("/cart/clear", headers=USER)

        assert response.status_code == 200
        assert response.json()["data"]["items"] == []
        assert response.json()["data"]["totalPrice"] == 0.0
