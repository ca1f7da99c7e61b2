from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authchat.db.tables import (
    MESSAGES_INDEXES,
    MESSAGES_REACTION_COLUMN,
    MESSAGES_TABLE,
    SCHEMA_VERSION_TABLE,
    USERS_PROFILE_IMAGE_COLUMN,
    USERS_TABLE,
)
from authchat.exceptions import MigrationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class Migration(NamedTuple):
    version: int
    name: str
    apply: Callable[[AsyncConnection], Awaitable[None]]


async def get_columns(connection: AsyncConnection, table: str) -> set[str]:
    result = await connection.exec_driver_sql(f"PRAGMA table_info({table})")
    return {row[1] for row in result}


async def _add_column(connection: AsyncConnection, table: str, column: str, ddl: str) -> None:
    if column in await get_columns(connection, table):
        logger.info("Column %s.%s already present", table, column)
        return

    await connection.exec_driver_sql(ddl)


async def create_users(connection: AsyncConnection) -> None:
    await connection.exec_driver_sql(USERS_TABLE)


async def create_messages(connection: AsyncConnection) -> None:
    await connection.exec_driver_sql(MESSAGES_TABLE)


async def add_profile_image(connection: AsyncConnection) -> None:
    await _add_column(connection, "users", "profile_image", USERS_PROFILE_IMAGE_COLUMN)


async def add_reaction(connection: AsyncConnection) -> None:
    await _add_column(connection, "messages", "reaction", MESSAGES_REACTION_COLUMN)


async def create_message_indexes(connection: AsyncConnection) -> None:
    for ddl in MESSAGES_INDEXES:
        await connection.exec_driver_sql(ddl)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "create users", create_users),
    Migration(2, "create messages", create_messages),
    Migration(3, "add users.profile_image", add_profile_image),
    Migration(4, "add messages.reaction", add_reaction),
    Migration(5, "create message indexes", create_message_indexes),
)


async def get_schema_version(connection: AsyncConnection) -> int:
    result = await connection.execute(text("SELECT MAX(version) FROM schema_version"))
    return result.scalar() or 0


async def apply_migrations(
    engine: AsyncEngine,
    migrations: tuple[Migration, ...] = MIGRATIONS,
) -> int:
    """
    Bring the database up to the newest schema version.

    Every step runs in its own transaction together with the row recording it
    in ``schema_version``, so an interrupted run resumes at the failed step.

    :return: The schema version after the run.
    """
    async with engine.begin() as connection:
        await connection.exec_driver_sql(SCHEMA_VERSION_TABLE)
        current = await get_schema_version(connection)

    for migration in migrations:
        if migration.version <= current:
            continue

        try:
            async with engine.begin() as connection:
                await migration.apply(connection)
                await connection.execute(
                    text("INSERT INTO schema_version (version, name) VALUES (:version, :name)"),
                    {"version": migration.version, "name": migration.name},
                )
        except SQLAlchemyError as e:
            raise MigrationError(version=migration.version, name=migration.name) from e

        current = migration.version
        logger.info("Applied migration %s: %s", migration.version, migration.name)

    return current
