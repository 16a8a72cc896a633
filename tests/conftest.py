"""pytest configuration: path management and shared app fixtures."""
from __future__ import annotations

import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

# Ensure the project root is available on sys.path so tests can import the app package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from beauty_portfolio import create_app  # noqa: E402
from beauty_portfolio.config import TestingConfig  # noqa: E402
from beauty_portfolio.extensions import db  # noqa: E402
from beauty_portfolio.models import AdminUser, Appointment, Service  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def app():
    flask_app = create_app(TestingConfig)
    with flask_app.app_context():
        db.create_all()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(app, client):
    """Authorization header for a freshly created admin account."""
    with app.app_context():
        db.session.add(AdminUser(
            username=ADMIN_USERNAME,
            email="admin@beautyportfolio.com",
            password_hash=generate_password_hash(ADMIN_PASSWORD),
        ))
        db.session.commit()

    response = client.post("/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    token = response.get_json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_service(app):
    """Factory that inserts a service and returns its id."""

    def _make(name="Everyday Glam", duration=60, price="100.00", category="everyday", active=True):
        with app.app_context():
            service = Service(
                name=name,
                description=f"{name} description",
                duration=duration,
                price=Decimal(price),
                category=category,
                active=active,
            )
            db.session.add(service)
            db.session.commit()
            return service.id

    return _make


@pytest.fixture
def make_appointment(app):
    """Factory that inserts an appointment directly, bypassing the conflict check."""

    def _make(service_id, when, status="pending", email="client@example.com", name="Jamie Client", **extra):
        if isinstance(when, str):
            when = datetime.fromisoformat(when)
        with app.app_context():
            appointment = Appointment(
                service_id=service_id,
                client_name=name,
                client_email=email,
                client_phone="555-0100",
                appointment_date=when,
                status=status,
                **extra,
            )
            db.session.add(appointment)
            db.session.commit()
            return appointment.id

    return _make
