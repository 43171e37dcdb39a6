import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from shop_finance.models.base import Base
# Import all model classes to ensure they're registered on Base.metadata
from shop_finance.models.profile import Profile  # noqa: F401
from shop_finance.models.transaction import Transaction  # noqa: F401
from shop_finance.models.bill import Bill  # noqa: F401
from shop_finance.models.savings import SavingsGoal, SavingsContribution  # noqa: F401
from shop_finance.models.audit_log import AuditLog  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _get_database_url() -> str:
    # Read the env var directly so migrations don't need the platform settings
    return os.environ["DATABASE_URL"]


def run_migrations_offline() -> None:
    """Emit SQL scripts without a DB connection."""
    context.configure(
        url=_get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live DB connection."""
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = _get_database_url()
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
