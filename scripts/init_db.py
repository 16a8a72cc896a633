#!/usr/bin/env python3
"""Create the database tables for the configured DATABASE_URL"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from beauty_portfolio import create_app
from beauty_portfolio.extensions import db

def init_database():
    app = create_app()
    with app.app_context():
        db.create_all()
        tables = sorted(db.metadata.tables)
        print(f"✅ Created {len(tables)} tables: {', '.join(tables)}")

if __name__ == "__main__":
    init_database()
