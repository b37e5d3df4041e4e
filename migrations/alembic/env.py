"""Alembic migration environment for chatjournal."""

import os
import re
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from chatjournal.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_migration_url() -> str:
    """Use sqlalchemy.url from alembic.ini, falling back to DATABASE_URL.

    A `${VAR}` placeholder in alembic.ini is resolved from the environment.
    """
    url = (config.get_main_option("sqlalchemy.url") or "").strip()
    placeholder = re.fullmatch(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}", url)
    if placeholder:
        url = os.getenv(placeholder.group(1), "")
    if not url:
        url = os.getenv("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is not configured for Alembic migrations.")
    return url


def run_migrations_offline() -> None:
    """Emit SQL without a live database connection."""
    context.configure(
        url=get_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live database connection."""
    connectable = create_engine(get_migration_url(), poolclass=pool.NullPool)

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
