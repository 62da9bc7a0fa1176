from __future__ import annotations

from alembic import context

from taskgrid.config import SETTINGS
from taskgrid.infra import models  # noqa: F401
from taskgrid.infra.db import Base, engine

config = context.config
config.set_main_option("sqlalchemy.url", SETTINGS.database_url)
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=SETTINGS.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
