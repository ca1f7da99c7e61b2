from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import pytest_asyncio

from authchat.config import Settings
from authchat.store import ChatStore
from authchat.types.answer_types import OK, Created

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(database_path=str(tmp_path / "auth.db"), poll_interval=0.01, scrypt_n=2**10)


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncIterator[ChatStore]:
    async with ChatStore(settings) as chat_store:
        yield chat_store


@pytest_asyncio.fixture
async def users(store: ChatStore) -> tuple[int, int, int]:
    ids = []

    for username in ("alice", "bob", "carol"):
        result = await store.register(username, f"{username}@example.com", "secret1")
        assert isinstance(result, OK)
        assert isinstance(result.data, Created)
        ids.append(result.data.id)

    return ids[0], ids[1], ids[2]
