from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from authchat import AppSession, ChatStore, Settings
from authchat.types.answer_types import Error

if TYPE_CHECKING:
    from authchat.types.answer_types import ChatMessage

logging.basicConfig(format="%(asctime)s %(message)s", level=logging.INFO)
logger = logging.getLogger(__name__)


async def show(messages: list[ChatMessage]) -> None:
    logger.info(
        "Conversation: %s",
        [f"{message.sender_username}: {message.message} {message.reaction or ''}" for message in messages],
    )


async def run_demo() -> None:
    async with ChatStore(Settings.from_env()) as store:
        alice = AppSession(store)
        bob = AppSession(store)

        for session, username in ((alice, "alice"), (bob, "bob")):
            result = await session.register(username, f"{username}@example.com", "secret1", "secret1")
            if isinstance(result, Error):
                logger.info("Register %s: %s", username, result.message)

            result = await session.login(username, "secret1")
            if isinstance(result, Error):
                logger.error("Login %s failed: %s", username, result.message)
                return

        peer = next(user for user in await alice.chat_partners() if user.username == "bob")

        async with alice.open_chat(peer, show):
            await alice.send("Hello Bob!")
            await asyncio.sleep(store.settings.poll_interval)

            bob.selected_user = alice.current_user
            await bob.send("Hi Alice")
            await asyncio.sleep(store.settings.poll_interval)

            last = (await store.get_conversation(alice.current_user.id, peer.id))[-1]
            await store.toggle_reaction(last.id, "👍", last.reaction)
            await asyncio.sleep(store.settings.poll_interval)

        logger.info("Bob has %s unread message(s)", await bob.unread_count())


if __name__ == "__main__":
    asyncio.run(run_demo())
