"""
HTTP surface: poll triggers, webhook receivers, health.

Every failure below the route layer must come back as a flat 500 {"error"}.
"""
from shopmirror.schemas.shopify import EntityType
from shopmirror.services.store_gateway import StoreGateway


def test_root_is_plain_text(api):
    response = api.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "running" in response.text


def test_health(api):
    body = api.get("/health").json()
    assert body["status"] == "healthy"
    assert "version" in body


# ---------------------------------------------------------------------------
# Poll path
# ---------------------------------------------------------------------------

def test_fetch_products_stores_normalized_product(api, shopify, database):
    shopify.serve("products", "products", [{
        "id": 1,
        "title": "Shirt",
        "images": [{"src": "http://x/1.jpg"}],
        "variants": [{"id": 10, "price": 19.99}],
    }])

    response = api.get("/fetch-products")

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Products fetched and stored!"
    assert body["fetched"] == 1
    assert body["inserted"] == 1
    assert body["rejected"] == []

    stored = StoreGateway(database).get(EntityType.PRODUCTS, 1)
    assert stored.images == ["http://x/1.jpg"]
    assert stored.variants[0].model_dump() == {
        "id": 10, "title": None, "price": 19.99, "sku": None, "inventory_quantity": None,
    }


def test_fetch_orders_twice_reports_existing_as_rejected(api, shopify, database):
    shopify.serve("orders", "orders", [{"id": 1, "name": "#1001"}, {"id": 2, "name": "#1002"}])

    first = api.get("/fetch-orders").json()
    second = api.get("/fetch-orders")

    assert first["inserted"] == 2
    assert second.status_code == 201
    assert second.json()["inserted"] == 0
    assert sorted(r["key"] for r in second.json()["rejected"]) == [1, 2]
    assert StoreGateway(database).count(EntityType.ORDERS) == 2


def test_fetch_customers_skips_invalid_record(api, shopify, database):
    shopify.serve("customers", "customers", [
        {"id": 1, "email": "a@example.com"},
        {"id": 2, "email": None},
        {"id": 3, "email": "c@example.com", "addresses": [{"city": "Sydney", "default": True}]},
    ])

    response = api.get("/fetch-customers")

    assert response.status_code == 201
    body = response.json()
    assert body["inserted"] == 2
    assert [r["key"] for r in body["rejected"]] == [2]
    stored = StoreGateway(database).get(EntityType.CUSTOMERS, 3)
    assert stored.addresses[0].is_default is True


def test_fetch_inventory(api, shopify, database):
    shopify.serve("inventory_levels", "inventory_levels", [
        {"inventory_item_id": 42, "location_id": 7, "available": 3, "updated_at": "2024-01-01T00:00:00Z"},
    ])

    response = api.get("/fetch-inventory")

    assert response.status_code == 201
    assert response.json()["message"] == "Inventory fetched and stored!"
    assert StoreGateway(database).get(EntityType.INVENTORY, 42).product_id is None


def test_fetch_upstream_error_is_500(api, shopify):
    shopify.fail("orders", 503, text="Service Unavailable")

    response = api.get("/fetch-orders")

    assert response.status_code == 500
    assert "503" in response.json()["error"]


def test_fetch_upstream_wrong_shape_is_500(api, shopify):
    shopify.serve("products", "products", {"not": "a list"})

    response = api.get("/fetch-products")

    assert response.status_code == 500
    assert "error" in response.json()


# ---------------------------------------------------------------------------
# Webhook path
# ---------------------------------------------------------------------------

def test_order_webhook_stores_order(api, database):
    response = api.post("/webhook/orders/create", json={
        "id": 5,
        "name": "#1005",
        "total_price": "20.00",
        "line_items": [],
        "customer": None,
        "created_at": "2024-01-01T00:00:00Z",
    })

    assert response.status_code == 200
    assert response.json() == {"message": "Order received and stored!", "id": 5}

    stored = StoreGateway(database).get(EntityType.ORDERS, 5)
    assert stored.order_number == "#1005"
    assert stored.total_price == "20.00"
    assert stored.customer is None
    assert stored.line_items == []


def test_order_webhook_redelivery_is_500(api, database):
    payload = {"id": 5, "name": "#1005"}
    assert api.post("/webhook/orders/create", json=payload).status_code == 200

    response = api.post("/webhook/orders/create", json=payload)

    assert response.status_code == 500
    assert "already exists" in response.json()["error"]
    assert StoreGateway(database).count(EntityType.ORDERS) == 1


def test_product_webhook(api, database):
    response = api.post("/webhook/products/create", json={
        "id": 1, "title": "Shirt", "body_html": "<b>bold</b>", "images": [],
    })

    assert response.status_code == 200
    stored = StoreGateway(database).get(EntityType.PRODUCTS, 1)
    assert stored.description == "<b>bold</b>"
    assert stored.images == []


def test_customer_webhook(api, database):
    response = api.post("/webhook/customers/create", json={
        "id": 9, "email": "n@example.com", "total_spent": "0.00", "addresses": [],
    })

    assert response.status_code == 200
    assert response.json()["id"] == 9
    assert StoreGateway(database).get(EntityType.CUSTOMERS, 9).total_spent == "0.00"


def test_customer_webhook_missing_email_is_500(api, database):
    response = api.post("/webhook/customers/create", json={"id": 9})

    assert response.status_code == 500
    assert "email" in response.json()["error"]
    assert StoreGateway(database).count(EntityType.CUSTOMERS) == 0


def test_inventory_webhook_twice_keeps_latest(api, database):
    first = api.post("/webhook/inventory/update", json={
        "inventory_item_id": 42, "location_id": 7, "available": 10,
    })
    second = api.post("/webhook/inventory/update", json={
        "inventory_item_id": 42, "location_id": 7, "available": 4,
    })

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["inventory_item_id"] == 42
    gateway = StoreGateway(database)
    assert gateway.count(EntityType.INVENTORY) == 1
    assert gateway.get(EntityType.INVENTORY, 42).available == 4


def test_webhook_unparseable_body_is_500(api):
    response = api.post(
        "/webhook/orders/create",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert "error" in response.json()


def test_webhook_non_object_body_is_500(api):
    response = api.post("/webhook/inventory/update", json=[{"inventory_item_id": 42}])

    assert response.status_code == 500
    assert "expected an object" in response.json()["error"]
