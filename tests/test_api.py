"""API tests."""

import json
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.exc import OperationalError

from src.api.dependencies import (
    get_active_pantry_items,
    get_llm_service,
    get_receipt_service,
)
from src.main import app
from src.models.inventory import InventoryLogEntry
from src.schemas.receipt_scan import RawLineItem
from src.services.exceptions import (
    ExtractionRequestError,
    LLMRequestError,
    NoItemsExtractedError,
)


def _create(client, headers=None, **fields):
    payload = {"name": "Milk", "quantity": 1, "unit": "gallon"}
    payload.update(fields)
    response = client.post("/api/v1/inventory", headers=headers or {}, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _in_days(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# --- Inventory items ---


def test_create_inventory_item(client, user_headers):
    data = _create(
        client,
        headers=user_headers,
        name="Ground beef",
        quantity=2,
        unit="lb",
        category="Meat",
        price=9.98,
        expiration_date=_in_days(3),
    )

    assert data["name"] == "Ground beef"
    assert data["standard_unit"] == "g"
    assert data["conversion_factor"] == 453.5924
    assert data["initial_quantity"] == 2
    assert data["current_quantity"] == 2
    assert data["status"] == 1
    assert data["user_id"] == "household-1"


def test_create_inventory_item_rejects_non_positive_quantity(client):
    response = client.post("/api/v1/inventory", json={"name": "Milk", "quantity": 0})
    assert response.status_code == 422


def test_create_inventory_item_rejects_blank_name(client):
    response = client.post("/api/v1/inventory", json={"name": "   ", "quantity": 1})
    assert response.status_code == 422
    assert "name" in response.json()["detail"]


def test_list_inventory_items_sorted(client):
    _create(client, name="Salt")
    _create(client, name="Rice", expiration_date=_in_days(30))
    _create(client, name="Spinach", expiration_date=_in_days(2))

    response = client.get("/api/v1/inventory")
    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Spinach", "Rice", "Salt"]

    response = client.get("/api/v1/inventory", params={"sort": "name", "ascending": "false"})
    assert [item["name"] for item in response.json()] == ["Spinach", "Salt", "Rice"]


def test_list_inventory_items_rejects_unknown_sort(client):
    response = client.get("/api/v1/inventory", params={"sort": "price"})
    assert response.status_code == 422


def test_list_expiring_items(client):
    _create(client, name="Spinach", expiration_date=_in_days(1))
    _create(client, name="Yogurt", expiration_date=_in_days(5))
    _create(client, name="Rice", expiration_date=_in_days(40))

    response = client.get("/api/v1/inventory/expiring")
    assert [item["name"] for item in response.json()] == ["Spinach", "Yogurt"]

    response = client.get("/api/v1/inventory/expiring", params={"days": 2})
    assert [item["name"] for item in response.json()] == ["Spinach"]


def test_expire_item_moves_it_to_expired_list(client):
    item = _create(client, name="Cream", expiration_date=_in_days(-1))

    response = client.post(f"/api/v1/inventory/{item['id']}/expire")
    assert response.status_code == 200
    assert response.json()["status"] == -1

    assert client.get("/api/v1/inventory").json() == []
    expired = client.get("/api/v1/inventory/expired").json()
    assert [row["id"] for row in expired] == [item["id"]]


def test_get_missing_item_returns_404(client):
    response = client.get("/api/v1/inventory/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Inventory item not found"


def test_update_inventory_item(client):
    item = _create(client, quantity=2, price=3.0, expiration_date=_in_days(3))

    response = client.put(
        f"/api/v1/inventory/{item['id']}",
        json={"quantity": 5, "expiration_date": None},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["current_quantity"] == 5
    assert data["initial_quantity"] == 5
    assert data["expiration_date"] is None
    assert data["price"] == 3.0


def test_update_inventory_item_rejects_null_quantity(client):
    item = _create(client)
    response = client.put(f"/api/v1/inventory/{item['id']}", json={"quantity": None})
    assert response.status_code == 422


def test_update_inventory_item_failure_changes_nothing(client, db):
    item = _create(client, quantity=2, price=3.0, expiration_date=_in_days(3))

    failure = OperationalError("UPDATE", {}, Exception("connection reset"))
    with patch.object(db, "commit", side_effect=failure):
        response = client.put(
            f"/api/v1/inventory/{item['id']}",
            json={"expiration_date": _in_days(10), "quantity": 1, "price": 5.0},
        )

    assert response.status_code == 503
    assert "Nothing was changed" in response.json()["detail"]

    current = client.get(f"/api/v1/inventory/{item['id']}").json()
    assert current["expiration_date"] == _in_days(3)
    assert current["current_quantity"] == 2
    assert current["price"] == 3.0


def test_list_inventory_items_descending_is_reverse_of_ascending(client):
    for name in ["apple", "Apple", "banana", "Banana"]:
        _create(client, name=name)

    for sort in ["name", "created_at"]:
        ascending = client.get("/api/v1/inventory", params={"sort": sort}).json()
        descending = client.get(
            "/api/v1/inventory", params={"sort": sort, "ascending": "false"}
        ).json()
        assert [i["id"] for i in descending] == [i["id"] for i in reversed(ascending)]


def test_delete_inventory_item_keeps_logs(client, db):
    item = _create(client, quantity=2)
    client.post(f"/api/v1/inventory/{item['id']}/usage", json={"amount": 1})

    response = client.delete(f"/api/v1/inventory/{item['id']}")
    assert response.status_code == 204
    assert client.get(f"/api/v1/inventory/{item['id']}").status_code == 404

    logs = db.query(InventoryLogEntry).all()
    assert len(logs) == 1
    assert logs[0].item_id is None


# --- Usage ---


def test_log_usage(client):
    item = _create(client, name="Milk", quantity=1, unit="l")

    response = client.post(
        f"/api/v1/inventory/{item['id']}/usage",
        json={"amount": 0.25},
    )
    assert response.status_code == 201
    assert response.json()["action_type"] == "consumed"

    updated = client.get(f"/api/v1/inventory/{item['id']}").json()
    assert updated["current_quantity"] == 0.75


def test_log_usage_clamps_at_zero(client):
    item = _create(client, name="Eggs", quantity=2, unit="count")

    response = client.post(
        f"/api/v1/inventory/{item['id']}/usage",
        json={"amount": 5, "action_type": "spoiled"},
    )
    assert response.status_code == 201
    assert response.json()["amount_changed"] == 5

    updated = client.get(f"/api/v1/inventory/{item['id']}").json()
    assert updated["current_quantity"] == 0

    logs = client.get(f"/api/v1/inventory/{item['id']}/logs").json()
    assert [(log["action_type"], log["amount_changed"]) for log in logs] == [("spoiled", 5)]


def test_log_usage_validation(client):
    item = _create(client)
    response = client.post(f"/api/v1/inventory/{item['id']}/usage", json={"amount": 0})
    assert response.status_code == 422

    response = client.post("/api/v1/inventory/999/usage", json={"amount": 1})
    assert response.status_code == 404


# --- Bulk add ---


def test_bulk_add_reports_failed_rows(client, user_headers):
    response = client.post(
        "/api/v1/inventory/bulk",
        headers=user_headers,
        json={
            "items": [
                {"name": "Bananas", "quantity": 6},
                {"name": "Broken", "quantity": -1},
                {"name": "Flour", "quantity": 2, "unit": "kg", "price": 3.99},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["added"] == 2
    assert [row["item"]["name"] for row in data["failed"]] == ["Broken"]
    assert [row["name"] for row in data["items"]] == ["Bananas", "Flour"]
    assert data["items"][1]["standard_unit"] == "g"


# --- Receipts ---


def _fake_receipt_service(items=None, error=None):
    service = MagicMock()
    service.extract = AsyncMock(return_value=items, side_effect=error)
    return service


def test_preview_receipt(client):
    items = [RawLineItem(name="Milk", quantity=1, unit="gallon", price=3.49)]
    app.dependency_overrides[get_receipt_service] = lambda: _fake_receipt_service(items)

    response = client.post(
        "/api/v1/inventory/receipt/preview",
        files={"file": ("receipt.jpg", b"fake image", "image/jpeg")},
    )

    assert response.status_code == 200
    assert response.json()["items"][0]["name"] == "Milk"
    # Nothing saved
    assert client.get("/api/v1/inventory").json() == []


def test_preview_receipt_no_items(client):
    app.dependency_overrides[get_receipt_service] = lambda: _fake_receipt_service(
        error=NoItemsExtractedError("nothing parsed")
    )

    response = client.post(
        "/api/v1/inventory/receipt/preview",
        files={"file": ("receipt.jpg", b"fake image", "image/jpeg")},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == NoItemsExtractedError.user_message


def test_preview_receipt_service_unavailable(client):
    app.dependency_overrides[get_receipt_service] = lambda: _fake_receipt_service(
        error=ExtractionRequestError("timeout")
    )

    response = client.post(
        "/api/v1/inventory/receipt/preview",
        files={"file": ("receipt.jpg", b"fake image", "image/jpeg")},
    )

    assert response.status_code == 502
    assert response.json()["detail"] == ExtractionRequestError.user_message


def test_scan_receipt_rejects_invalid_type(client):
    response = client.post(
        "/api/v1/inventory/scan-receipt",
        files={"file": ("receipt.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 400


def test_scan_receipt_rejects_empty_file(client):
    response = client.post(
        "/api/v1/inventory/scan-receipt",
        files={"file": ("receipt.jpg", b"", "image/jpeg")},
    )
    assert response.status_code == 400


def test_scan_receipt_queues_task(client, user_headers):
    with patch("src.tasks.receipt_scan.process_receipt_scan.delay") as mock_task:
        response = client.post(
            "/api/v1/inventory/scan-receipt",
            headers=user_headers,
            files={"file": ("receipt.png", b"fake image", "image/png")},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    mock_task.assert_called_once()
    scan_id, _, media_type = mock_task.call_args.args
    assert scan_id == data["id"]
    assert media_type == "image/png"

    response = client.get(f"/api/v1/inventory/scan-receipt/{data['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["user_id"] == "household-1"

    scans = client.get("/api/v1/inventory/scan-receipts").json()
    assert [scan["id"] for scan in scans] == [data["id"]]


def test_get_missing_receipt_scan(client):
    response = client.get("/api/v1/inventory/scan-receipt/999")
    assert response.status_code == 404


# --- Recipes ---


def _fake_llm(reply=None, error=None):
    mock_llm = MagicMock()
    mock_llm.generate = AsyncMock(return_value=reply, side_effect=error)
    return mock_llm


def test_suggest_recipe(client):
    _create(client, name="Spinach", quantity=1, unit="bag", expiration_date=_in_days(1))
    _create(client, name="Eggs", quantity=6, unit="count", expiration_date=_in_days(14))
    reply = json.dumps(
        {
            "name": "Spinach Frittata",
            "prepTime": "20 minutes",
            "servings": 2,
            "ingredientsFromPantry": [{"name": "Spinach"}, {"name": "Eggs", "quantity": "4"}],
            "ingredientsToBuy": [],
            "directions": ["Whisk.", "Bake."],
        }
    )
    mock_llm = _fake_llm(reply)
    app.dependency_overrides[get_llm_service] = lambda: mock_llm

    response = client.post("/api/v1/recipes/suggest")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "llm"
    assert data["pantry_item_count"] == 2
    assert data["recipe"]["name"] == "Spinach Frittata"
    assert data["recipe"]["directions"] == ["Whisk.", "Bake."]
    assert "[USE SOON]" in mock_llm.generate.call_args.kwargs["prompt"]


def test_suggest_recipe_fallback(client):
    _create(client, name="Rice", quantity=1, unit="kg")
    app.dependency_overrides[get_llm_service] = lambda: _fake_llm("Just make fried rice.")

    response = client.post("/api/v1/recipes/suggest")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "fallback"
    assert data["recipe"]["directions"] == ["Just make fried rice."]


def test_suggest_recipe_empty_pantry(client):
    mock_llm = _fake_llm("unused")
    app.dependency_overrides[get_llm_service] = lambda: mock_llm

    response = client.post("/api/v1/recipes/suggest")

    assert response.status_code == 200
    assert response.json()["source"] == "placeholder"
    assert response.json()["pantry_item_count"] == 0
    mock_llm.generate.assert_not_called()


def test_suggest_recipe_llm_unavailable(client):
    _create(client, name="Rice", quantity=1, unit="kg")
    app.dependency_overrides[get_llm_service] = lambda: _fake_llm(
        error=LLMRequestError("connection refused")
    )

    response = client.post("/api/v1/recipes/suggest")
    assert response.status_code == 502


def test_get_active_pantry_items_lists_soonest_expiry_first():
    store = MagicMock()
    store.list_active.return_value = ["item"]

    assert get_active_pantry_items(store) == ["item"]
    store.list_active.assert_called_once_with(sort_key="expiration_date")


def test_suggest_recipe_uses_pantry_dependency(client):
    pantry = [
        MagicMock(is_active=True, expiration_date=None, current_quantity=2.0, user_unit="kg")
    ]
    pantry[0].name = "Flour"
    mock_llm = _fake_llm("Bake bread.")
    app.dependency_overrides[get_llm_service] = lambda: mock_llm
    app.dependency_overrides[get_active_pantry_items] = lambda: pantry

    response = client.post("/api/v1/recipes/suggest")

    assert response.status_code == 200
    assert response.json()["pantry_item_count"] == 1
    assert "Flour" in mock_llm.generate.call_args.kwargs["prompt"]
