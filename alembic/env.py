import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from telus_umrah.core.config import settings
from telus_umrah.db.session import Base

# Import all models so Alembic sees them in metadata
from telus_umrah.models.hotel import Hotel  # noqa: F401
from telus_umrah.models.umrah_package import UmrahPackage  # noqa: F401
from telus_umrah.models.hotel_booking import HotelBooking  # noqa: F401
from telus_umrah.models.package_booking import PackageBooking  # noqa: F401
from telus_umrah.models.custom_umrah_request import CustomUmrahRequest  # noqa: F401

# Alembic Config object
config = context.config

# Force sqlalchemy.url from the runtime DATABASE_URL
db_url = getattr(settings, "DATABASE_URL", None) or os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set (check .env / telus_umrah.core.config.settings)")

config.set_main_option("sqlalchemy.url", db_url)

# Logging config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    url = config.get_main_option("sqlalchemy.url")

    # Not engine_from_config: alembic.ini carries no URL, it always comes from settings.
    connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
