"""
Single source of truth for database tables that exist after migrations (001).

Use these names when writing raw SQL (e.g. TRUNCATE in scripts). alembic/env.py asserts
that the registered models match this tuple.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "tenants",
    "staff",
    "services",
    "customers",
    "appointments",
    "otp_verifications",
)

# Tables cleared when resetting demo data. Children first for FKs.
DEMO_RESET_TABLE_NAMES = (
    "appointments",
    "otp_verifications",
    "customers",
    "services",
    "staff",
    "tenants",
)
