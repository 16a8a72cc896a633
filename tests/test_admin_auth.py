"""Tests for admin login and token handling."""
from __future__ import annotations

from werkzeug.security import check_password_hash

from beauty_portfolio.extensions import db
from beauty_portfolio.models import AdminUser


def test_login_returns_token(client, admin_headers) -> None:
    response = client.post("/admin/login", json={"username": "admin", "password": "admin123"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["token"]
    assert data["admin"]["username"] == "admin"
    assert "password_hash" not in data["admin"]


def test_login_wrong_password(client, admin_headers) -> None:
    response = client.post("/admin/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_login_missing_fields(client) -> None:
    response = client.post("/admin/login", json={"username": "admin"})

    assert response.status_code == 400


def test_check_requires_token(client) -> None:
    assert client.get("/admin/check").status_code == 401
    assert client.get("/admin/check", headers={"Authorization": "Bearer forged.token"}).status_code == 401


def test_check_with_token(client, admin_headers) -> None:
    response = client.get("/admin/check", headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["authenticated"] is True


def test_token_signed_with_other_key_is_rejected(app, client, admin_headers) -> None:
    app.config["SECRET_KEY"] = "rotated-secret"

    assert client.get("/admin/check", headers=admin_headers).status_code == 401


def test_update_password(app, client, admin_headers) -> None:
    response = client.post(
        "/admin/update-password",
        headers=admin_headers,
        json={"current_password": "admin123", "new_password": "n3w-secret"},
    )

    assert response.status_code == 200
    with app.app_context():
        admin = AdminUser.query.filter_by(username="admin").first()
        assert check_password_hash(admin.password_hash, "n3w-secret")


def test_update_password_wrong_current(client, admin_headers) -> None:
    response = client.post(
        "/admin/update-password",
        headers=admin_headers,
        json={"current_password": "nope", "new_password": "n3w-secret"},
    )

    assert response.status_code == 401


def test_update_password_too_short(client, admin_headers) -> None:
    response = client.post(
        "/admin/update-password",
        headers=admin_headers,
        json={"current_password": "admin123", "new_password": "abc"},
    )

    assert response.status_code == 400


def test_token_for_deleted_admin_is_rejected(app, client, admin_headers) -> None:
    with app.app_context():
        db.session.delete(AdminUser.query.filter_by(username="admin").first())
        db.session.commit()

    assert client.get("/admin/check", headers=admin_headers).status_code == 401


def test_login_rejects_non_string_credentials(client, admin_headers) -> None:
    response = client.post("/admin/login", json={"username": "admin", "password": 123})

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_payload"
