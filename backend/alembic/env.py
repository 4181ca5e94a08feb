from logging.config import fileConfig

from dotenv import load_dotenv
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from sqlalchemy.engine import make_url
from alembic import context

from app.config import settings
from app.db.base import Base
from app.db.tables import ALL_TABLE_NAMES
from app.models.appointment import Appointment  # noqa: F401
from app.models.customer import Customer  # noqa: F401
from app.models.otp_verification import OtpVerification  # noqa: F401
from app.models.service import Service  # noqa: F401
from app.models.staff import Staff  # noqa: F401
from app.models.tenant import Tenant  # noqa: F401

load_dotenv()

# Booking tables registered on Base must be exactly those the migrations create.
_missing = set(ALL_TABLE_NAMES) - set(Base.metadata.tables)
_unlisted = set(Base.metadata.tables) - set(ALL_TABLE_NAMES)
assert not _missing and not _unlisted, (
    f"Salon schema out of sync: no model for {sorted(_missing)}, "
    f"not in ALL_TABLE_NAMES {sorted(_unlisted)}. "
    "Tenant, staff, service, customer, appointment and OTP tables live in app.models."
)


def _configure_kwargs(dialect_name: str) -> dict:
    # SQLite cannot ALTER constraints in place; the partial slot index needs batch mode there
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": dialect_name == "sqlite",
    }


config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        **_configure_kwargs(make_url(url).get_backend_name()),
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            **_configure_kwargs(connection.dialect.name),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
