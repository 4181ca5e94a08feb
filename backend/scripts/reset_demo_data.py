#!/usr/bin/env python3
"""
Delete all rows from every app table (schema stays). Children first, see DEMO_RESET_TABLE_NAMES.

Run from backend dir:
  python scripts/reset_demo_data.py
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy import text

from app.db.session import engine
from app.db.tables import DEMO_RESET_TABLE_NAMES


def main():
    with engine.connect() as conn:
        for name in DEMO_RESET_TABLE_NAMES:
            result = conn.execute(text(f"DELETE FROM {name}"))
            print(f"{name}: deleted {result.rowcount} rows")
        conn.commit()
    print("Done.")


if __name__ == "__main__":
    main()
