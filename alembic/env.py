"""Alembic environment for the `async_jobs` and `query_log` tables."""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from procgate.config import config_load_database_url
from procgate.db.schema import db_metadata

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

database_url = config_load_database_url()
alembic_config.set_main_option("sqlalchemy.url", database_url)

# SQLite cannot ALTER most columns in place; batch mode rebuilds the table.
migration_options = {
    "target_metadata": db_metadata,
    "compare_type": True,
    "render_as_batch": database_url.startswith("sqlite"),
}


def alembic_run_offline() -> None:
    """Emit migration SQL without a live connection."""

    context.configure(url=database_url, literal_binds=True, **migration_options)
    with context.begin_transaction():
        context.run_migrations()


def alembic_run_online() -> None:
    """Apply migrations over a single unpooled connection."""

    engine = engine_from_config(
        alembic_config.get_section(alembic_config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **migration_options)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    alembic_run_offline()
else:
    alembic_run_online()
