import pytest


@pytest.fixture
def drinks(client):
    category = client.post("/api/v1/orders/categories", json={"name": "drinks"}).json()
    beer = client.post(
        f"/api/v1/orders/categories/{category['id']}/templates",
        json={"name": "beer", "unitPrice": 100},
    ).json()
    water = client.post(
        f"/api/v1/orders/categories/{category['id']}/templates",
        json={"name": "water", "unitPrice": 20, "vatMode": "nil"},
    ).json()
    return {"category": category, "beer": beer, "water": water}


def order_body(drinks, date="2024-01-10T00:00:00", **quantities):
    return {
        "categoryId": drinks["category"]["id"],
        "orderDate": date,
        "items": [
            {"templateId": drinks[name]["id"], "quantity": qty}
            for name, qty in quantities.items()
        ],
    }


def test_category_and_templates(client, drinks):
    assert drinks["category"]["name"] == "Drinks"
    assert drinks["category"]["vatPercentage"] == 15
    assert drinks["water"]["isVatNil"] is True
    assert drinks["water"]["vatPercentage"] == 0

    response = client.get(f"/api/v1/orders/categories/{drinks['category']['id']}/templates")
    assert [t["name"] for t in response.json()] == ["Beer", "Water"]


def test_create_order(client, drinks):
    response = client.post("/api/v1/orders", json=order_body(drinks, beer=2, water=1))

    assert response.status_code == 201
    order = response.json()
    assert order["totalCost"] == pytest.approx(250)
    assert order["items"][0]["vatAmount"] == pytest.approx(30)


def test_duplicate_order_is_conflict(client, drinks):
    client.post("/api/v1/orders", json=order_body(drinks, beer=1))

    response = client.post(
        "/api/v1/orders", json=order_body(drinks, date="2024-01-10T17:30:00", beer=2)
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "duplicate_order"
    assert body["detail"] == 'An order for "Drinks" already exists for 10 Jan 2024'
    assert body["categoryName"] == "Drinks"
    assert body["orderDate"].startswith("2024-01-10")


def test_availability_and_update(client, drinks):
    order = client.post("/api/v1/orders", json=order_body(drinks, beer=1, water=1)).json()

    toggled = client.patch(
        f"/api/v1/orders/{order['id']}/items/{order['items'][0]['id']}",
        json={"isAvailable": False},
    )
    assert toggled.json()["totalCost"] == 20

    body = order_body(drinks, date="2024-01-12T00:00:00", beer=3)
    del body["categoryId"]
    updated = client.put(f"/api/v1/orders/{order['id']}", json=body)
    assert updated.status_code == 200
    assert updated.json()["totalCost"] == pytest.approx(345)
    assert updated.json()["lastEditedAt"] is not None


def test_category_detail_and_delete(client, drinks):
    client.post("/api/v1/orders", json=order_body(drinks, beer=1))
    client.post("/api/v1/orders", json=order_body(drinks, date="2024-01-15T00:00:00", water=2))
    category_id = drinks["category"]["id"]

    detail = client.get(f"/api/v1/orders/categories/{category_id}").json()
    assert len(detail["itemTemplates"]) == 2
    assert [o["orderDate"][:10] for o in detail["orders"]] == ["2024-01-15", "2024-01-10"]

    assert client.delete(f"/api/v1/orders/categories/{category_id}").status_code == 204
    assert client.get(f"/api/v1/orders/categories/{category_id}").status_code == 404


def test_price_line_calculator(client):
    response = client.post(
        "/api/v1/orders/price-line",
        json={"quantity": 2, "unitPrice": 100, "vatMode": "standard", "vatPercentage": 15},
    )

    assert response.json() == {"subtotal": 200, "vatAmount": 30, "totalPrice": 230}


def test_price_list_and_over_endpoints(client):
    created = client.post("/api/v1/price-list", json={"name": "rice", "price": 50, "grossPrice": 40})
    assert created.status_code == 201
    assert created.json()["name"] == "Rice"

    bad = client.post("/api/v1/price-list", json={"name": "oil", "price": 0})
    assert bad.status_code == 422

    items = client.get("/api/v1/price-list", params={"sort": "price-asc"}).json()
    assert [i["name"] for i in items] == ["Rice"]

    over = client.post("/api/v1/over", json={"name": "sugar"}).json()
    toggled = client.post(f"/api/v1/over/{over['id']}/toggle").json()
    assert toggled["isCompleted"] is True
    assert client.post("/api/v1/over", json={"name": "Sugar"}).status_code == 201


def test_backup_export_and_import(client, drinks):
    client.post("/api/v1/orders", json=order_body(drinks, beer=1))
    bundle = client.get("/api/v1/backup/export").json()
    assert bundle["version"] == "2.0"
    assert len(bundle["orderManagement"]["orders"]) == 1

    response = client.post("/api/v1/backup/import", json=bundle)
    assert response.status_code == 200
    assert response.json()["imported"]["orders"] == 1

    invalid = client.post("/api/v1/backup/import", json={"hello": "world"})
    assert invalid.status_code == 422
    assert invalid.json()["detail"] == "Invalid Golden Store database file format"
