# scripts/setup/init_db.py
"""
Initialize database: creates/upgrades all tables and seeds the bootstrap admin.
Safe to run any number of times (also runs automatically at API startup).
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from labtrack.database import SessionLocal, engine
from labtrack.services.schema_service import ensure_schema
from labtrack.config import settings
from sqlalchemy import inspect, text


def main():
    print("Lab Attendance Tracker: DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot open database: {e}")
        sys.exit(1)

    print("\nEnsuring schema...")
    db = SessionLocal()
    try:
        report = ensure_schema(db)
    finally:
        db.close()

    print(f"  tables created:  {report.created_tables or '-'}")
    print(f"  columns added:   {report.added_columns or '-'}")
    print(f"  indexes created: {report.created_indexes or '-'}")
    if report.skipped_indexes:
        print(f"  indexes skipped: {report.skipped_indexes} (duplicate open sessions in existing data)")
    print(f"  admin seeded:    {report.seeded_admin} (StudentID {settings.BOOTSTRAP_ADMIN_ID})")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\nTables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn labtrack.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()
