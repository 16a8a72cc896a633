#!/usr/bin/env python3
"""Seed the default service catalog. Services that already exist by name are left alone."""
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from beauty_portfolio import create_app
from beauty_portfolio.extensions import db
from beauty_portfolio.models import Service

DEFAULT_SERVICES = [
    {
        "name": "Bridal Makeup",
        "description": "Complete bridal look with trial session, touch-up kit and on-location service",
        "duration": 240,
        "price": Decimal("425.00"),
        "category": "bridal",
    },
    {
        "name": "Special Event Makeup",
        "description": "Glamorous makeup for galas, parties and photoshoots",
        "duration": 120,
        "price": Decimal("200.00"),
        "category": "event",
    },
    {
        "name": "Everyday Glam",
        "description": "Polished everyday look for work, dates or a night out",
        "duration": 60,
        "price": Decimal("100.00"),
        "category": "everyday",
    },
    {
        "name": "Makeup Lesson",
        "description": "One-on-one lesson covering techniques and product recommendations",
        "duration": 120,
        "price": Decimal("200.00"),
        "category": "lesson",
    },
    {
        "name": "Group Session",
        "description": "Makeup for groups of three or more, priced per person",
        "duration": 180,
        "price": Decimal("125.00"),
        "category": "group",
    },
]

def seed_services():
    app = create_app()
    with app.app_context():
        db.create_all()

        existing = {name for (name,) in db.session.query(Service.name).all()}
        created = 0
        for data in DEFAULT_SERVICES:
            if data["name"] in existing:
                print(f"⏭️  {data['name']} already exists")
                continue
            db.session.add(Service(**data))
            created += 1
            print(f"➕ {data['name']} ({data['duration']} min, ${data['price']})")

        db.session.commit()
        print(f"✅ Seeded {created} service(s)")

if __name__ == "__main__":
    seed_services()
