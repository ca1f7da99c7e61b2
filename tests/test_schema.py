from __future__ import annotations

from typing import TYPE_CHECKING

import bcrypt
import pytest
from sqlalchemy import text

from authchat.config import Settings
from authchat.db import MIGRATIONS, apply_migrations, create_sqlite_session_pool
from authchat.db.migrations import Migration, get_columns
from authchat.exceptions import DatabaseInitError, MigrationError
from authchat.store import ChatStore
from authchat.types.answer_types import OK, Error, ErrorCode, UserInfo

if TYPE_CHECKING:
    from pathlib import Path

LEGACY_USERS = """CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)"""

LEGACY_MESSAGES = """CREATE TABLE messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_id INTEGER NOT NULL,
    receiver_id INTEGER NOT NULL,
    message TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    is_read INTEGER DEFAULT 0
)"""


@pytest.mark.asyncio
async def test_initialize_applies_every_migration(store: ChatStore):
    assert store.schema_version == MIGRATIONS[-1].version

    async with store.db.engine.connect() as connection:
        assert "profile_image" in await get_columns(connection, "users")
        assert "reaction" in await get_columns(connection, "messages")
        rows = await connection.exec_driver_sql("SELECT version FROM schema_version")
        assert [row[0] for row in rows] == [migration.version for migration in MIGRATIONS]


@pytest.mark.asyncio
async def test_initialize_twice_is_a_noop(settings: Settings):
    async with ChatStore(settings) as first:
        version = first.schema_version

    async with ChatStore(settings) as second:
        assert second.schema_version == version

        async with second.db.engine.connect() as connection:
            count = await connection.exec_driver_sql("SELECT COUNT(*) FROM schema_version")
            assert count.scalar() == len(MIGRATIONS)


@pytest.mark.asyncio
async def test_legacy_database_gains_new_columns(settings: Settings):
    engine, _ = await create_sqlite_session_pool(settings.database_url)
    async with engine.begin() as connection:
        await connection.exec_driver_sql(LEGACY_USERS)
        await connection.exec_driver_sql(LEGACY_MESSAGES)
        await connection.exec_driver_sql(
            "INSERT INTO users (username, email, password) VALUES ('old', 'old@x.com', 'x')",
        )
    await engine.dispose()

    async with ChatStore(settings) as store:
        async with store.db.engine.connect() as connection:
            assert "profile_image" in await get_columns(connection, "users")
            assert "reaction" in await get_columns(connection, "messages")

        others = await store.list_others(viewer_id=0)
        assert [user.username for user in others] == ["old"]


@pytest.mark.asyncio
async def test_unopenable_database_raises(tmp_path: Path):
    settings = Settings(database_path=str(tmp_path / "missing" / "dir" / "auth.db"))

    with pytest.raises(DatabaseInitError) as exc_info:
        await ChatStore(settings).initialize()

    assert exc_info.value.path == settings.database_path


@pytest.mark.asyncio
async def test_store_before_initialize(settings: Settings):
    store = ChatStore(settings)

    result = await store.register("alice", "a@x.com", "secret1")
    assert isinstance(result, Error)
    assert result.code == ErrorCode.NOT_INITIALIZED
    assert result.message == "Database not initialized"

    assert await store.list_others(1) == []
    assert await store.get_conversation(1, 2) == []
    assert await store.get_unread_count(1) == 0


@pytest.mark.asyncio
async def test_store_after_close(store: ChatStore):
    await store.close()

    result = await store.send(1, 2, "hello")
    assert isinstance(result, Error)
    assert result.code == ErrorCode.NOT_INITIALIZED


@pytest.mark.asyncio
async def test_legacy_bcrypt_account_can_log_in(settings: Settings):
    legacy_hash = bcrypt.hashpw(b"secret1", bcrypt.gensalt(10, prefix=b"2a")).decode()
    assert legacy_hash.startswith("$2a$10$")

    engine, _ = await create_sqlite_session_pool(settings.database_url)
    async with engine.begin() as connection:
        await connection.exec_driver_sql(LEGACY_USERS)
        await connection.exec_driver_sql(LEGACY_MESSAGES)
        await connection.execute(
            text("INSERT INTO users (username, email, password) VALUES ('old', 'old@x.com', :pw)"),
            {"pw": legacy_hash},
        )
    await engine.dispose()

    async with ChatStore(settings) as store:
        result = await store.login("old", "secret1")
        assert isinstance(result, OK)
        assert isinstance(result.data, UserInfo)
        assert result.data.username == "old"

        wrong = await store.login("old", "secret2")
        assert wrong == Error(
            code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid username or password",
        )


async def broken_step(connection):
    await connection.exec_driver_sql("ALTER TABLE no_such_table ADD COLUMN nope TEXT")


@pytest.mark.asyncio
async def test_failed_migration_resumes_at_failed_step(settings: Settings):
    engine, _ = await create_sqlite_session_pool(settings.database_url)
    broken = (*MIGRATIONS[:2], Migration(3, "broken step", broken_step), *MIGRATIONS[3:])

    try:
        with pytest.raises(MigrationError) as exc_info:
            await apply_migrations(engine, broken)

        assert exc_info.value.version == 3
        assert exc_info.value.name == "broken step"

        async with engine.connect() as connection:
            rows = await connection.exec_driver_sql("SELECT version FROM schema_version")
            assert [row[0] for row in rows] == [1, 2]

        assert await apply_migrations(engine) == MIGRATIONS[-1].version

        async with engine.connect() as connection:
            rows = await connection.exec_driver_sql("SELECT version FROM schema_version")
            assert [row[0] for row in rows] == [migration.version for migration in MIGRATIONS]
            assert "profile_image" in await get_columns(connection, "users")
    finally:
        await engine.dispose()
