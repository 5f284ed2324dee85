"""Tests for admin endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient

from coffee_ops.api.app import create_app
from tests.conftest import make_latte

ADMIN_HEADERS = {"X-Admin-Token": "admin-token"}


def test_admin_requires_token(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/admin/health").status_code == 401
    assert (
        client.get("/admin/health", headers={"X-Admin-Token": "wrong"}).status_code
        == 401
    )
    assert client.get("/admin/health", headers=ADMIN_HEADERS).status_code == 200


def test_admin_create_ingredient(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/ingredients",
        json={
            "name": "Vanilla Syrup",
            "unit": "ml",
            "base_unit_cost": 95000,
            "base_unit_quantity": 750,
            "category": "syrup",
        },
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 201
    assert response.json()["ingredient"]["name"] == "Vanilla Syrup"
    assert container.ingredient_service.categories() == ["syrup"]


def test_admin_create_ingredient_validation(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/ingredients",
        json={"name": " ", "unit": "ml", "base_unit_quantity": 0},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 422
    assert response.json()["detail"] == [
        "Name is required",
        "Base unit quantity must be greater than 0",
    ]


def test_admin_update_ingredient(container) -> None:
    client = TestClient(create_app(container))
    ingredient = container.ingredient_service.create({"name": "Milk", "unit": "ml"})

    response = client.patch(
        f"/admin/ingredients/{ingredient.id}",
        json={"base_unit_cost": 21000, "base_unit_quantity": 1000},
        headers=ADMIN_HEADERS,
    )
    missing = client.patch(
        f"/admin/ingredients/{uuid4()}", json={"note": "x"}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    assert container.ingredient_service.get(ingredient.id).base_unit_cost == 21000
    assert missing.status_code == 404


def test_admin_delete_ingredient(container) -> None:
    client = TestClient(create_app(container))
    latte = make_latte(container.ingredient_service, container.product_service)
    milk_id = latte.ingredients[1].ingredient_id
    spare = container.ingredient_service.create({"name": "Straws", "unit": "piece"})

    in_use = client.delete(f"/admin/ingredients/{milk_id}", headers=ADMIN_HEADERS)
    deleted = client.delete(f"/admin/ingredients/{spare.id}", headers=ADMIN_HEADERS)
    missing = client.delete(f"/admin/ingredients/{uuid4()}", headers=ADMIN_HEADERS)

    assert in_use.status_code == 409
    assert deleted.status_code == 200
    assert not container.ingredient_service.get(spare.id).is_active
    assert missing.status_code == 404


def test_admin_product_recipe(container) -> None:
    client = TestClient(create_app(container))
    beans = container.ingredient_service.create(
        {
            "name": "Coffee Beans",
            "unit": "g",
            "base_unit_cost": 200000,
            "base_unit_quantity": 1000,
        }
    )

    created = client.post(
        "/admin/products", json={"name": "Espresso"}, headers=ADMIN_HEADERS
    )
    product_id = created.json()["product"]["id"]
    added = client.post(
        f"/admin/products/{product_id}/ingredients",
        json={"ingredient_id": str(beans.id), "usage_per_unit": 18},
        headers=ADMIN_HEADERS,
    )
    duplicate = client.post(
        f"/admin/products/{product_id}/ingredients",
        json={"ingredient_id": str(beans.id), "usage_per_unit": 20},
        headers=ADMIN_HEADERS,
    )
    negative = client.post(
        f"/admin/products/{product_id}/ingredients",
        json={"ingredient_id": str(beans.id), "usage_per_unit": -1},
        headers=ADMIN_HEADERS,
    )
    unknown = client.post(
        f"/admin/products/{product_id}/ingredients",
        json={"ingredient_id": str(uuid4()), "usage_per_unit": 5},
        headers=ADMIN_HEADERS,
    )

    assert created.status_code == 201
    assert added.status_code == 201
    assert duplicate.status_code == 409
    assert negative.status_code == 422
    assert unknown.status_code == 404
    assert client.get(f"/products/{product_id}/cogs").json()[
        "total_cost_per_unit"
    ] == 3600


def test_admin_remove_product_ingredient(container) -> None:
    client = TestClient(create_app(container))
    latte = make_latte(container.ingredient_service, container.product_service)
    milk_id = latte.ingredients[1].ingredient_id

    removed = client.delete(
        f"/admin/products/{latte.id}/ingredients/{milk_id}", headers=ADMIN_HEADERS
    )
    again = client.delete(
        f"/admin/products/{latte.id}/ingredients/{milk_id}", headers=ADMIN_HEADERS
    )

    assert removed.status_code == 200
    assert again.status_code == 404


def test_admin_warehouse_batch_from_purchase_plan(container) -> None:
    client = TestClient(create_app(container))
    latte = make_latte(container.ingredient_service, container.product_service)

    response = client.post(
        "/admin/warehouse/batches",
        json={"product_id": str(latte.id), "note": "Monday delivery"},
        headers=ADMIN_HEADERS,
    )
    repeat = client.post(
        "/admin/warehouse/batches",
        json={"product_id": str(latte.id)},
        headers=ADMIN_HEADERS,
    )
    stats = client.get("/admin/warehouse/stats", headers=ADMIN_HEADERS).json()
    batches = client.get("/admin/warehouse/batches", headers=ADMIN_HEADERS).json()
    transactions = client.get(
        "/admin/stock/transactions",
        params={"ingredient_name": "Milk"},
        headers=ADMIN_HEADERS,
    ).json()

    assert response.status_code == 201
    batch = response.json()["batch"]
    assert batch["batch_number"] == 1
    assert batch["note"].startswith("Monday delivery | Purchase plan")
    assert len(batch["items"]) == 2
    assert repeat.status_code == 422
    assert stats["total_value"] == 580000
    assert stats["total_value_display"] == "Rp580.000"
    assert stats["latest_batch_number"] == 1
    assert len(batches["batches"]) == 1
    assert transactions["transactions"][0]["reason"] == "Warehouse batch #1"


def test_admin_warehouse_batch_unknown_product(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/warehouse/batches",
        json={"product_id": str(uuid4())},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 404


def test_admin_reserve_and_release_stock(container) -> None:
    client = TestClient(create_app(container))
    container.stock_service.add_stock("Milk", "ml", 5000, reason="Opening")

    reserved = client.post(
        "/admin/stock/reserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 1500},
        headers=ADMIN_HEADERS,
    )
    released = client.post(
        "/admin/stock/unreserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 500},
        headers=ADMIN_HEADERS,
    )
    updated = client.put(
        "/admin/stock/reservation",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 0},
        headers=ADMIN_HEADERS,
    )
    stock = client.get("/stock").json()["stock"][0]

    assert reserved.status_code == 200
    assert reserved.json() == {
        "success": True,
        "available_stock": 3500,
        "reserved_stock": 1500,
    }
    assert released.json()["reserved_stock"] == 1000
    assert updated.json()["reserved_stock"] == 0
    assert stock["reserved_stock"] == 0
    assert stock["available"] == 5000
    types = [
        item["transaction_type"]
        for item in client.get(
            "/admin/stock/transactions", headers=ADMIN_HEADERS
        ).json()["transactions"]
    ]
    assert types == ["UNRESERVE", "UNRESERVE", "RESERVE", "ADD"]


def test_admin_reservation_refusals(container) -> None:
    client = TestClient(create_app(container))
    container.stock_service.add_stock("Milk", "ml", 1000, reason="Opening")

    too_much = client.post(
        "/admin/stock/reserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 1500},
        headers=ADMIN_HEADERS,
    )
    nothing_reserved = client.post(
        "/admin/stock/unreserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 1},
        headers=ADMIN_HEADERS,
    )
    unknown = client.post(
        "/admin/stock/reserve",
        json={"ingredient_name": "Syrup", "unit": "ml", "quantity": 1},
        headers=ADMIN_HEADERS,
    )
    invalid = client.post(
        "/admin/stock/reserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 0},
        headers=ADMIN_HEADERS,
    )
    unauthorised = client.post(
        "/admin/stock/reserve",
        json={"ingredient_name": "Milk", "unit": "ml", "quantity": 1},
    )

    assert too_much.status_code == 409
    assert too_much.json()["detail"] == (
        "Insufficient stock to reserve Milk: need 1500.0, have 1000"
    )
    assert nothing_reserved.status_code == 409
    assert unknown.status_code == 404
    assert invalid.status_code == 422
    assert unauthorised.status_code == 401
    assert container.stock_service.get_level("Milk", "ml").reserved_stock == 0
