"""
Component Tests for Inventory HTTP API

Endpoints through FastAPI TestClient with the in-memory service, including
identity headers and the exception-to-status mapping.
"""

import pytest
from datetime import date, timedelta

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.fixtures import make_identity_headers, make_item_create_request

API = "/api/v1/inventory"


def create_item(client, headers, **overrides) -> dict:
    response = client.post(f"{API}/items", json=make_item_create_request(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealthEndpoints:
    """Tests for /health and /info"""

    def test_health_without_factory(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "inventory_service"
        assert data["status"] in ["healthy", "degraded"]
        assert "dependencies" in data

    def test_versioned_health(self, client):
        assert client.get(f"{API}/health").status_code == 200

    def test_service_info(self, client):
        response = client.get("/info")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "1.0.0"
        assert "item_sharing" in data["capabilities"]


class TestIdentity:
    """Identity headers"""

    def test_missing_identity_is_401(self, client):
        response = client.get(f"{API}/items")

        assert response.status_code == 401

    def test_unknown_role_is_401(self, client):
        response = client.get(f"{API}/items", headers={"X-User-Id": "usr_1", "X-User-Role": "chef"})

        assert response.status_code == 401

    def test_admin_view_requires_admin(self, client, user_headers, admin_headers):
        assert client.get(f"{API}/admin/sharing/requests", headers=user_headers).status_code == 403
        assert client.get(f"{API}/admin/sharing/requests", headers=admin_headers).status_code == 200


class TestItemEndpoints:
    """Item CRUD"""

    def test_create_and_get(self, client, user_headers):
        created = create_item(client, user_headers, name="Butter", quantity=2, unit="kg",
                              category="dairy", purchase_date=date(2023, 1, 1))

        assert created["expiry_date"] == "2023-01-08"
        assert created["owner_id"] == user_headers["X-User-Id"]
        assert "days_until_expiry" in created
        assert "expiry_status" in created

        response = client.get(f"{API}/items/{created['item_id']}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Butter"

    def test_create_invalid_body_is_422(self, client, user_headers):
        response = client.post(f"{API}/items", json={"name": "X", "quantity": -1, "unit": "kg",
                                                      "category": "meat"}, headers=user_headers)

        assert response.status_code == 422

    def test_create_with_expiry_before_purchase_is_400(self, client, user_headers):
        response = client.post(
            f"{API}/items",
            json=make_item_create_request(purchase_date=date(2023, 1, 5), expiry_date=date(2023, 1, 1)),
            headers=user_headers,
        )

        assert response.status_code == 400
        assert response.json()["field"] == "expiry_date"

    def test_get_missing_is_404(self, client, user_headers):
        assert client.get(f"{API}/items/inv_missing", headers=user_headers).status_code == 404

    def test_list_with_filters(self, client, user_headers):
        today = date.today()
        create_item(client, user_headers, name="Soon", purchase_date=today, expiry_date=today + timedelta(days=2))
        create_item(client, user_headers, name="Later", purchase_date=today, expiry_date=today + timedelta(days=20),
                    sharing_available=True)

        everything = client.get(f"{API}/items", headers=user_headers).json()
        expiring = client.get(f"{API}/items", params={"filter": "expiring"}, headers=user_headers).json()
        wide = client.get(f"{API}/items", params={"filter": "expiring", "days": 30}, headers=user_headers).json()
        sharing = client.get(f"{API}/items", params={"filter": "sharing"}, headers=user_headers).json()

        assert [i["name"] for i in everything["items"]] == ["Soon", "Later"]
        assert [i["name"] for i in expiring["items"]] == ["Soon"]
        assert expiring["filter"] == "expiring"
        assert wide["total"] == 2
        assert [i["name"] for i in sharing["items"]] == ["Later"]

    def test_update(self, client, user_headers):
        created = create_item(client, user_headers)

        response = client.patch(f"{API}/items/{created['item_id']}", json={"quantity": 1.5},
                                headers=user_headers)

        assert response.status_code == 200
        assert response.json()["quantity"] == 1.5

    def test_delete(self, client, user_headers):
        created = create_item(client, user_headers)

        response = client.delete(f"{API}/items/{created['item_id']}", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.delete(f"{API}/items/{created['item_id']}", headers=user_headers).status_code == 404


class TestDepletionEndpoints:
    """Consumption and waste logging"""

    def test_consume_then_waste_too_much(self, client, user_headers):
        item = create_item(client, user_headers, quantity=5)

        consumed = client.post(f"{API}/consumption", json={"item_id": item["item_id"], "quantity": 3},
                               headers=user_headers)
        wasted = client.post(f"{API}/waste", json={"item_id": item["item_id"], "quantity": 3,
                                                   "reason": "spoiled"}, headers=user_headers)

        assert consumed.status_code == 201
        assert consumed.json()["item_name"] == item["name"]
        assert wasted.status_code == 400
        assert "available" in wasted.json()["detail"]
        assert client.get(f"{API}/items/{item['item_id']}", headers=user_headers).json()["quantity"] == 2

    def test_zero_quantity_is_400(self, client, user_headers):
        item = create_item(client, user_headers)

        response = client.post(f"{API}/consumption", json={"item_id": item["item_id"], "quantity": 0},
                               headers=user_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize("literal", ["NaN", "Infinity"])
    def test_non_finite_quantity_is_422(self, client, user_headers, literal):
        item = create_item(client, user_headers, quantity=5)
        headers = {**user_headers, "Content-Type": "application/json"}

        for path in ("consumption", "waste"):
            body = f'{{"item_id": "{item["item_id"]}", "quantity": {literal}, "reason": "spoiled"}}'
            response = client.post(f"{API}/{path}", content=body, headers=headers)
            assert response.status_code == 422
            assert response.json()["detail"][0]["loc"][-1] == "quantity"

        listed = client.get(f"{API}/items", headers=user_headers)
        assert listed.status_code == 200
        assert listed.json()["items"][0]["quantity"] == 5

    @pytest.mark.parametrize("literal", ["NaN", "Infinity"])
    def test_non_finite_item_quantity_is_422(self, client, user_headers, literal):
        headers = {**user_headers, "Content-Type": "application/json"}
        body = f'{{"name": "Cream", "quantity": {literal}, "unit": "l", "category": "dairy"}}'

        response = client.post(f"{API}/items", content=body, headers=headers)

        assert response.status_code == 422
        assert client.get(f"{API}/items", headers=user_headers).json()["total"] == 0

    def test_unknown_item_is_404(self, client, user_headers):
        response = client.post(f"{API}/waste", json={"item_id": "inv_missing", "quantity": 1,
                                                     "reason": "expired"}, headers=user_headers)

        assert response.status_code == 404

    def test_logs(self, client, user_headers):
        item = create_item(client, user_headers, quantity=10)
        client.post(f"{API}/consumption", json={"item_id": item["item_id"], "quantity": 1,
                                                "consumption_date": "2023-01-02"}, headers=user_headers)
        client.post(f"{API}/consumption", json={"item_id": item["item_id"], "quantity": 2,
                                                "consumption_date": "2023-01-04"}, headers=user_headers)
        client.post(f"{API}/waste", json={"item_id": item["item_id"], "quantity": 1, "reason": "damaged",
                                          "disposal_date": "2023-01-03"}, headers=user_headers)

        consumption = client.get(f"{API}/consumption", headers=user_headers).json()
        recent = client.get(f"{API}/consumption", params={"since": "2023-01-03"}, headers=user_headers).json()
        waste = client.get(f"{API}/waste", headers=user_headers).json()

        assert [e["consumption_date"] for e in consumption["events"]] == ["2023-01-04", "2023-01-02"]
        assert recent["total"] == 1
        assert waste["events"][0]["reason"] == "damaged"


class TestSharingEndpoints:
    """Sharing marketplace"""

    def test_request_flow(self, client, user_headers, admin_headers):
        owner = make_identity_headers()
        shared = create_item(client, owner, name="Soup", sharing_available=True)

        available = client.get(f"{API}/sharing/available", headers=user_headers).json()
        mine = client.get(f"{API}/sharing/mine", headers=owner).json()
        created = client.post(f"{API}/sharing/requests", json={"item_id": shared["item_id"]},
                              headers=user_headers)
        own_requests = client.get(f"{API}/sharing/requests", headers=user_headers).json()
        owner_requests = client.get(f"{API}/sharing/requests", headers=owner).json()
        all_requests = client.get(f"{API}/admin/sharing/requests", headers=admin_headers).json()

        assert available["total"] == 1
        assert mine["total"] == 1
        assert created.status_code == 201
        assert created.json()["status"] == "requested"
        assert created.json()["requester_name"] == user_headers["X-User-Email"]
        assert own_requests["total"] == 1
        assert owner_requests["total"] == 0
        assert all_requests["total"] == 1

    def test_request_unshared_item_is_400(self, client, user_headers):
        private = create_item(client, user_headers)

        response = client.post(f"{API}/sharing/requests", json={"item_id": private["item_id"]},
                               headers=user_headers)

        assert response.status_code == 400


class TestReportEndpoints:
    """Dashboard, reports and forecast"""

    def test_dashboard(self, client, user_headers):
        today = date.today()
        create_item(client, user_headers, quantity=1, category="dairy",
                    purchase_date=today, expiry_date=today + timedelta(days=1))

        data = client.get(f"{API}/dashboard", headers=user_headers).json()

        assert data["inventory_count"] == 1
        assert data["expiring_count"] == 1
        assert data["low_stock_count"] == 1
        assert data["waste_count"] == 0

    def test_reports(self, client, user_headers):
        item = create_item(client, user_headers, quantity=10)
        client.post(f"{API}/consumption", json={"item_id": item["item_id"], "quantity": 3},
                    headers=user_headers)
        client.post(f"{API}/waste", json={"item_id": item["item_id"], "quantity": 1, "reason": "expired"},
                    headers=user_headers)

        waste = client.get(f"{API}/reports/waste", params={"window_days": 7}, headers=user_headers).json()
        usage = client.get(f"{API}/reports/usage", headers=user_headers).json()

        assert waste["window_days"] == 7
        assert waste["by_reason"] == {"expired": 1.0}
        assert usage["waste_percentage"] == 25.0
        assert usage["total_consumption"] == 3.0

    def test_forecast(self, client, user_headers):
        item = create_item(client, user_headers, quantity=10)

        response = client.get(f"{API}/items/{item['item_id']}/forecast", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["historical"]) == 7
        assert len(data["predicted"]) == 7
        assert data["history_days"] == 0

    def test_forecast_missing_item_is_404(self, client, user_headers):
        assert client.get(f"{API}/items/inv_missing/forecast", headers=user_headers).status_code == 404


class TestStoreFailures:
    """Document store failures map to 503"""

    @pytest.fixture
    def failing_client(self, failing_store):
        from fastapi.testclient import TestClient
        from microservices.inventory_service.inventory_service import InventoryService
        from microservices.inventory_service.main import app, get_service

        service = InventoryService(failing_store)
        app.dependency_overrides[get_service] = lambda: service
        yield TestClient(app, raise_server_exceptions=False)
        app.dependency_overrides.clear()

    def test_dashboard_store_failure_is_503(self, failing_client, failing_store, user_headers):
        failing_store.fail_on("query")

        response = failing_client.get(f"{API}/dashboard", headers=user_headers)

        assert response.status_code == 503
        assert "dashboard" in response.json()["detail"]
