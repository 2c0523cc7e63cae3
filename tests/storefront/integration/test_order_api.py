"""Integration tests for the order endpoints."""

import pytest

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


@pytest.fixture()
def order_payload(make_product):
    product = make_product(name="Basic Tee", price=10.0, sizes=["M"], images=["https://cdn.example.com/tee.jpg"])
    return {
        "orderItems": [
            {
                "productId": product.id,
                "name": "Basic Tee",
                "unitPrice": 10.0,
                "quantity": 2,
                "image": "https://cdn.example.com/tee.jpg",
                "selectedSize": "M",
            }
        ],
        "paymentMethod": "CARD",
        "address": "addr-1",
        "username": "Jane Doe",
        "totalAmount": 20.0,
        "discountAmount": 2.0,
        "finalAmount": 18.0,
        "discountCode": "SAVE10",
    }


def _place(client, payload, headers=USER):
    return client.post("/orders", json=payload, headers=headers)


class TestPlaceOrder:
    def test_place(self, client, order_payload):
        response = _place(client, order_payload)

        assert response.status_code == 201
        body = response.json()
        assert "pagination" not in body
        order = body["data"]
        assert order["orderNumber"].startswith("ORD-")
        assert order["status"] == "PENDING"
        assert order["username"] == "Jane Doe"
        assert order["addressId"] == "addr-1"
        assert order["finalAmount"] == 18.0
        assert order["items"][0]["selectedSize"] == "M"

    def test_address_id_key_is_accepted(self, client, order_payload):
        order_payload["addressId"] = order_payload.pop("address")

        response = _place(client, order_payload)

        assert response.status_code == 201
        assert response.json()["data"]["addressId"] == "addr-1"

    def test_item_product_and_price_keys_are_accepted(self, client, order_payload):
        item = order_payload["orderItems"][0]
        item["product"] = item.pop("productId")
        item["price"] = item.pop("unitPrice")

        response = _place(client, order_payload)

        assert response.status_code == 201
        assert response.json()["data"]["items"][0]["unitPrice"] == 10.0

    def test_username_is_optional(self, client, order_payload):
        del order_payload["username"]

        response = _place(client, order_payload)

        assert response.status_code == 201
        assert response.json()["data"]["username"] is None

    def test_missing_address(self, client, order_payload):
        del order_payload["address"]

        response = _place(client, order_payload)

        assert response.status_code == 400
        assert "address" in response.json()["data"]

    def test_empty_order(self, client, order_payload):
        order_payload["orderItems"] = []

        response = _place(client, order_payload)

        assert response.status_code == 400
        assert "items" in response.json()["data"]

    def test_unknown_product(self, client, order_payload):
        order_payload["orderItems"][0]["productId"] = "missing"
        assert _place(client, order_payload).status_code == 404

    def test_invalid_variant(self, client, order_payload):
        order_payload["orderItems"][0]["selectedSize"] = "XXL"
        assert _place(client, order_payload).status_code == 400

    def test_requires_user(self, client, order_payload):
        assert client.post("/orders", json=order_payload).status_code == 401


class TestReadOrders:
    def test_mine_lists_only_callers_orders(self, client, order_payload):
        _place(client, order_payload)
        _place(client, order_payload, headers=OTHER_USER)

        response = client.get("/orders/mine", headers=USER)

        assert response.status_code == 200
        orders = response.json()["data"]
        assert len(orders) == 1
        assert orders[0]["userId"] == "user-1"

    def test_owner_can_read(self, client, order_payload):
        order_id = _place(client, order_payload).json()["data"]["id"]

        response = client.get(f"/orders/{order_id}", headers=USER)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == order_id

    def test_other_user_is_denied(self, client, order_payload):
        order_id = _place(client, order_payload).json()["data"]["id"]

        response = client.get(f"/orders/{order_id}", headers=OTHER_USER)

        assert response.status_code == 403
        assert response.json()["status"] == "error"
        assert response.json()["message"] == "You are not allowed to view this order"
        assert response.json()["data"] == {"order_id": ["You are not allowed to view this order"]}

    def test_missing(self, client):
        response = client.get("/orders/missing", headers=USER)

        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"


class TestListOrders:
    def test_lists_every_users_orders_with_pagination(self, client, order_payload):
        _place(client, order_payload)
        _place(client, order_payload, headers=OTHER_USER)
        _place(client, order_payload)

        response = client.get("/orders", params={"page": 0, "size": 2}, headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 1, "totalPages": 2, "totalItems": 3}

    def test_second_page(self, client, order_payload):
        for _ in range(3):
            _place(client, order_payload)

        body = client.get("/orders", params={"page": 1, "size": 2}, headers=USER).json()

        assert len(body["data"]) == 1
        assert body["pagination"]["page"] == 2

    def test_filter_by_status(self, client, order_payload):
        shipped_id = _place(client, order_payload).json()["data"]["id"]
        _place(client, order_payload)
        client.put(f"/orders/{shipped_id}/status", json={"status": "shipped"}, headers=USER)

        body = client.get("/orders", params={"status": "shipped"}, headers=USER).json()

        assert [order["id"] for order in body["data"]] == [shipped_id]
        assert body["pagination"]["totalItems"] == 1

    def test_unknown_status_filter(self, client):
        response = client.get("/orders", params={"status": "lost"}, headers=USER)

        assert response.status_code == 400
        assert "status" in response.json()["data"]

    def test_requires_user(self, client):
        assert client.get("/orders").status_code == 401


class TestSearchOrders:
    def test_matches_order_number_ignoring_case(self, client, order_payload):
        wanted = _place(client, order_payload).json()["data"]
        _place(client, order_payload)

        response = client.get("/orders/search", params={"orderId": wanted["orderNumber"].lower()}, headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert [order["id"] for order in body["data"]] == [wanted["id"]]
        assert body["pagination"] == {"page": 1, "totalPages": 1, "totalItems": 1}

    def test_common_prefix_matches_every_order(self, client, order_payload):
        _place(client, order_payload)
        _place(client, order_payload, headers=OTHER_USER)

        body = client.get("/orders/search", params={"orderId": "ord-"}, headers=USER).json()

        assert body["pagination"]["totalItems"] == 2

    def test_no_match(self, client, order_payload):
        _place(client, order_payload)

        body = client.get("/orders/search", params={"orderId": "ORD-19990101"}, headers=USER).json()

        assert body["data"] == []
        assert body["pagination"]["totalItems"] == 0

    def test_search_term_is_required(self, client):
        response = client.get("/orders/search", headers=USER)

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide an order number to search for"


class TestStatusAndDelete:
    def test_update_status(self, client, order_payload):
        order_id = _place(client, order_payload).json()["data"]["id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=USER)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "DELIVERED"

    def test_invalid_status(self, client, order_payload):
        order_id = _place(client, order_payload).json()["data"]["id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "lost"}, headers=USER)

        assert response.status_code == 400
        assert "status" in response.json()["data"]

    def test_delete(self, client, order_payload):
        order_id = _place(client, order_payload).json()["data"]["id"]

        response = client.delete(f"/orders/{order_id}", headers=USER)

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Order deleted", "data": []}
        assert client.get(f"/orders/{order_id}", headers=USER).status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/orders/missing", headers=USER).status_code == 404
