# scripts/setup/init_db.py
"""
Initialize database: creates all tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from requisition.config import settings
from requisition.database import create_db_engine, create_tables


def main():
    print("🗄️  Vehicle Requisition DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables(engine)

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    print("\n🎉 Database ready! Create an admin, then start the backend:")
    print("   python scripts/setup/create_admin.py --name 'Fleet Admin' --email admin@example.com")
    print(f"   uvicorn requisition.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()
