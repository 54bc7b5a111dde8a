"""Alembic environment for the stays schema."""

from logging.config import fileConfig
from typing import Any

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from sqlalchemy.schema import CreateSchema

from alembic import context  # type: ignore[attr-defined]
from stay_sync.config import DATABASE_URL, SCHEMA
from stay_sync.models.availability_overrides import AvailabilityOverride  # noqa: F401
from stay_sync.models.base import Base
from stay_sync.models.external_bookings import ExternalBooking  # noqa: F401
from stay_sync.models.reservations import Reservation  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def include_object(object_: Any, name: str, type_: str, reflected: bool, compare_to: Any) -> bool:
    # Tables outside the stays schema belong to other services sharing the database.
    return getattr(object_, "schema", SCHEMA) == SCHEMA


def skip_empty_revisions(context_: Any, revision: Any, directives: list[Any]) -> None:
    if config.cmd_opts and getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []


def _configure(**kwargs: Any) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_schemas=True,
        include_object=include_object,
        version_table_schema=SCHEMA,
        compare_type=True,
        process_revision_directives=skip_empty_revisions,
        **kwargs,
    )


def run_offline() -> None:
    """Emit the migration SQL to stdout instead of running it."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_with(connection: Connection) -> None:
    connection.execute(CreateSchema(SCHEMA, if_not_exists=True))
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    connectable = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _run_with(connection)


if context.is_offline_mode():
    run_offline()
else:
    run_online()
