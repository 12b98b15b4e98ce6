"""Alembic environment configuration."""

import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

# Make the app package importable when alembic runs from the repo root
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.db.base import Base

# Register every marketplace table on Base.metadata
from app import models  # noqa: F401

# asyncpg query options and their psycopg2 equivalents
_SSL_OPTIONS = {
    "ssl=false": "sslmode=disable",
    "ssl=true": "sslmode=require",
    "ssl=require": "sslmode=require",
}

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def sync_database_url(url: str) -> str:
    """Migrations run synchronously; swap the async driver for psycopg2."""
    if not url.startswith("postgresql+asyncpg://"):
        return url
    url = url.replace("postgresql+asyncpg://", "postgresql://")
    for async_option, sync_option in _SSL_OPTIONS.items():
        url = url.replace(f"?{async_option}", f"?{sync_option}")
        url = url.replace(f"&{async_option}", f"&{sync_option}")
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=sync_database_url(settings.DATABASE_URL),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    config.set_main_option("sqlalchemy.url", sync_database_url(settings.DATABASE_URL))

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
