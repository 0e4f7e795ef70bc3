"""Alembic environment for the peridot schema.

From the backend/ directory::

    alembic upgrade head
    alembic revision --autogenerate -m "add column"

The target URL is ``sqlalchemy.url`` when the caller set one on the
Config (tests do), otherwise ``settings.sync_db_url()``.  Migrations
always use the synchronous driver.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from peridot.config import settings  # noqa: E402
from peridot.db.models import Base  # noqa: E402

config = context.config
target_metadata = Base.metadata

# Programmatic callers pass configure_logger=False to keep their handlers.
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

db_url = config.get_main_option("sqlalchemy.url") or settings.sync_db_url()
config.set_main_option("sqlalchemy.url", db_url)
batch_mode = db_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """``alembic upgrade head --sql``: print the DDL instead of running it."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=batch_mode,
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
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=batch_mode,
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
