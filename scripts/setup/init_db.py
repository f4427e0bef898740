"""
Initialize database — creates all tables and seeds the sample mines.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--no-seed]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import datetime
from sqlalchemy import inspect, text
from rockwatch.config import get_settings
from rockwatch.database import SessionLocal, create_tables, engine
from rockwatch.models.mine import Mine

SAMPLE_MINES = [
    # name, location, lat, lon, state, type, level, probability
    ("Jharia Coalfield", "Dhanbad, Jharkhand", 23.7441, 86.4105, "Jharkhand", "Coal", "high", 0.85),
    ("Talcher Coalfield", "Angul, Odisha", 20.9517, 85.2283, "Odisha", "Coal", "medium", 0.52),
    ("Korba Coalfield", "Korba, Chhattisgarh", 22.3595, 82.7501, "Chhattisgarh", "Coal", "high", 0.78),
    ("Raniganj Coalfield", "Paschim Bardhaman, West Bengal", 23.6209, 87.1280, "West Bengal", "Coal", "low", 0.21),
    ("Singrauli Coalfield", "Singrauli, Madhya Pradesh", 24.1967, 82.6757, "Madhya Pradesh", "Coal", "medium", 0.49),
    ("Bellary Iron Ore", "Bellary, Karnataka", 15.1393, 76.9214, "Karnataka", "Iron Ore", "medium", 0.58),
    ("Bailadila Iron Ore", "Dantewada, Chhattisgarh", 18.6298, 81.3082, "Chhattisgarh", "Iron Ore", "high", 0.82),
    ("Goa Iron Ore", "South Goa, Goa", 15.2993, 74.1240, "Goa", "Iron Ore", "low", 0.18),
]


def seed_mines(db) -> int:
    """Insert sample mines that are not present yet (matched by name)."""
    existing = {name for (name,) in db.query(Mine.name).all()}
    now = datetime.utcnow()
    added = 0
    for name, location, lat, lon, state, mine_type, level, probability in SAMPLE_MINES:
        if name in existing:
            continue
        db.add(Mine(name=name, location=location, latitude=lat, longitude=lon, state=state,
                    mine_type=mine_type, current_risk_level=level, current_risk_probability=probability,
                    alert_level=level, last_updated=now, created_at=now))
        added += 1
    db.commit()
    return added


def main():
    parser = argparse.ArgumentParser(description="Create RockWatch tables and seed sample mines")
    parser.add_argument("--no-seed", action="store_true", help="Only create tables")
    args = parser.parse_args()

    print("🗄️  RockWatch DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {get_settings().DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if not args.no_seed:
        db = SessionLocal()
        try:
            added = seed_mines(db)
        finally:
            db.close()
        print(f"\n⛏️  Seeded {added} sample mines")

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn rockwatch.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
