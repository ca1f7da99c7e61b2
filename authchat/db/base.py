from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

if TYPE_CHECKING:
    from sqlite3 import Connection


class Base(DeclarativeBase):
    pass


def _enable_foreign_keys(dbapi_connection: Connection, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_sqlite_session_pool(
    url: str = "sqlite+aiosqlite:///auth.db",
    *,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(url, echo=echo)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    return engine, async_sessionmaker(engine, expire_on_commit=False)
