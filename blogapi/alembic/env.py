import os
import asyncio
from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from blogapi.config import normalize_database_url
from blogapi.models import Base

config = context.config

# target metadata for autogenerate
target_metadata = Base.metadata


def database_url() -> str:
    # DATABASE_URL wins over sqlalchemy.url in alembic.ini
    url = os.getenv('DATABASE_URL') or config.get_main_option('sqlalchemy.url')
    if not url:
        raise RuntimeError('DATABASE_URL is not set')
    return normalize_database_url(url)


def run_migrations_offline():
    """Emit the migration SQL without connecting (alembic upgrade --sql)."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    connectable: AsyncEngine = create_async_engine(database_url(), poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
