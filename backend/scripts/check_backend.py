#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from backend/:
  python scripts/check_backend.py
"""
import os
import socket
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env (optional: defaults run against a local SQLite file)
    if (backend_dir / ".env").exists():
        print("OK  .env exists")
    else:
        print("--  No backend/.env; using defaults (sqlite:///./salon.db, development secret)")

    # 2) Settings sanity
    from app.config import settings

    try:
        settings.check_secrets()
        print(f"OK  Settings (environment={settings.environment})")
    except ValueError as e:
        errors.append(str(e))
        print("FAIL Settings:", e)
    if not (settings.sms_usercode and settings.sms_password):
        print("--  SMS credentials not set; OTP codes and reminders will not be texted")

    # 3) DB connection and schema
    try:
        from sqlalchemy import inspect, text

        from app.db.session import engine
        from app.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        missing = sorted(set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names()))
        if missing:
            errors.append(f"Tables missing: {', '.join(missing)}. Run: alembic upgrade head")
            print("FAIL Schema: missing", ", ".join(missing))
        else:
            print("OK  Database connection and schema (DATABASE_URL)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from app.main import app  # noqa: F401

        print("OK  App import (app.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    # 5) Port 8000
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn app.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
