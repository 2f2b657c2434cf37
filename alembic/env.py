"""Alembic migration environment."""

from logging.config import fileConfig
import re

from sqlalchemy import engine_from_config, pool
from alembic import context

from taskhub.core.config import settings
from taskhub.core.database import Base, _normalize_async_database_url
from taskhub.core.logging import get_logger
from taskhub.models import Tenant, User, Project, Task, AuditLog  # noqa: F401

config = context.config

# Logging config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = get_logger("alembic.env")

database_url = _normalize_async_database_url(settings.DATABASE_URL)
# Alembic runs synchronously: swap async sqlite driver for the stdlib one
sync_database_url = database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)

logger.info(f"Using database URL (redacted): {re.sub(r':([^/@]+)@', ':****@', sync_database_url)}")

# Escape % for ConfigParser interpolation
config.set_main_option("sqlalchemy.url", sync_database_url.replace("%", "%%"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
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
