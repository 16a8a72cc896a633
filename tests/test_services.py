"""Tests for the service catalog, public and admin."""
from __future__ import annotations

from beauty_portfolio.extensions import db
from beauty_portfolio.models import Service


def test_public_catalog_lists_active_services_by_price(client, make_service) -> None:
    make_service(name="Bridal Makeup", duration=240, price="425.00", category="bridal")
    make_service(name="Everyday Glam", price="100.00")
    make_service(name="Retired Look", price="50.00", active=False)

    response = client.get("/services")

    assert response.status_code == 200
    services = response.get_json()["services"]
    assert [s["name"] for s in services] == ["Everyday Glam", "Bridal Makeup"]
    assert services[1]["price"] == "425.00"
    assert services[1]["duration"] == 240


def test_public_catalog_category_filter(client, make_service) -> None:
    make_service(name="Bridal Makeup", duration=240, price="425.00", category="bridal")
    make_service(name="Everyday Glam", price="100.00")

    services = client.get("/services?category=Bridal").get_json()["services"]

    assert [s["name"] for s in services] == ["Bridal Makeup"]


def test_get_service(client, make_service) -> None:
    service_id = make_service()

    assert client.get(f"/services/{service_id}").get_json()["service"]["id"] == service_id
    assert client.get("/services/missing").status_code == 404


def test_admin_catalog_includes_inactive(client, admin_headers, make_service) -> None:
    make_service(name="Everyday Glam")
    make_service(name="Retired Look", active=False)

    services = client.get("/admin/services", headers=admin_headers).get_json()["services"]

    assert {s["name"] for s in services} == {"Everyday Glam", "Retired Look"}


def test_create_service(client, admin_headers) -> None:
    response = client.post(
        "/admin/services",
        headers=admin_headers,
        json={
            "name": "Makeup Lesson",
            "description": "One-on-one lesson",
            "duration": 120,
            "price": "200",
            "category": "lesson",
        },
    )

    assert response.status_code == 201
    service = response.get_json()["service"]
    assert service["price"] == "200.00"
    assert service["active"] is True


def test_create_service_requires_auth(client) -> None:
    response = client.post("/admin/services", json={"name": "Sneaky", "duration": 60, "price": "10"})

    assert response.status_code == 401


def test_create_service_validation(client, admin_headers) -> None:
    cases = [
        {"duration": 60, "price": "10"},
        {"name": "No Duration", "price": "10"},
        {"name": "Zero Duration", "duration": 0, "price": "10"},
        {"name": "Bad Price", "duration": 60, "price": "ten"},
        {"name": "Negative Price", "duration": 60, "price": "-5"},
    ]

    for payload in cases:
        response = client.post("/admin/services", headers=admin_headers, json=payload)
        assert response.status_code == 400, payload
        assert response.get_json()["error"] == "invalid_payload"


def test_update_service(client, admin_headers, make_service) -> None:
    service_id = make_service(price="100.00")

    response = client.patch(
        f"/admin/services/{service_id}", headers=admin_headers, json={"price": "110.50", "active": False}
    )

    assert response.status_code == 200
    service = response.get_json()["service"]
    assert service["price"] == "110.50"
    assert service["active"] is False
    assert service["duration"] == 60


def test_update_missing_service(client, admin_headers) -> None:
    response = client.patch("/admin/services/missing", headers=admin_headers, json={"name": "Renamed"})

    assert response.status_code == 404


def test_delete_unused_service(app, client, admin_headers, make_service) -> None:
    service_id = make_service()

    response = client.delete(f"/admin/services/{service_id}", headers=admin_headers)

    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Service, service_id) is None


def test_delete_booked_service_deactivates_it(app, client, admin_headers, make_service, make_appointment) -> None:
    service_id = make_service()
    make_appointment(service_id, "2024-06-10T09:00", status="completed")

    response = client.delete(f"/admin/services/{service_id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["message"] == "Service deactivated"
    with app.app_context():
        assert db.session.get(Service, service_id).active is False
    assert client.get("/services").get_json()["services"] == []


def test_active_flag_must_be_boolean(app, client, admin_headers, make_service) -> None:
    service_id = make_service()

    update = client.patch(f"/admin/services/{service_id}", headers=admin_headers, json={"active": "false"})
    create = client.post(
        "/admin/services",
        headers=admin_headers,
        json={"name": "Brow Shaping", "duration": 30, "price": "35.00", "active": 0},
    )

    assert update.status_code == 400
    assert update.get_json()["message"] == "active must be a boolean"
    assert create.status_code == 400
    with app.app_context():
        assert db.session.get(Service, service_id).active is True
        assert Service.query.count() == 1


def test_service_text_fields_must_be_strings(client, admin_headers, make_service) -> None:
    service_id = make_service()

    response = client.patch(f"/admin/services/{service_id}", headers=admin_headers, json={"name": 42})

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_payload"
