from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from enum import Enum
from typing import TYPE_CHECKING, Self

from authchat.exceptions import PollerStateError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from authchat.store import ChatStore
    from authchat.types.answer_types import ChatMessage

    type OnUpdate = Callable[[list[ChatMessage]], Awaitable[None]]

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DEFAULT_POLL_INTERVAL = 2.0


class PollerState(Enum):
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


class ConversationPoller:
    def __init__(
        self,
        store: ChatStore,
        viewer_id: int,
        peer_id: int,
        on_update: OnUpdate,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Initialize the Poller Instance.

        :param store: The store the conversation is read from.
        :type store: ChatStore
        :param viewer_id: The user looking at the chat.
        :type viewer_id: int
        :param peer_id: The chat partner.
        :type peer_id: int
        :param on_update: Awaited with the full conversation after every tick.
        :type on_update: OnUpdate
        :param interval: Seconds between ticks.
        :type interval: float
        """
        self.store = store
        self.viewer_id = viewer_id
        self.peer_id = peer_id
        self.on_update = on_update
        self.interval = interval
        self.state = PollerState.IDLE
        self.ticks = 0
        self._task: asyncio.Task[None] | None = None

    async def tick(self) -> list[ChatMessage]:
        messages = await self.store.get_conversation(self.viewer_id, self.peer_id)
        await self.store.mark_read(sender_id=self.peer_id, receiver_id=self.viewer_id)
        await self.on_update(messages)
        self.ticks += 1

        return messages

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.exception(
                    "An error occurred while polling chat %s -> %s: %s",
                    self.viewer_id,
                    self.peer_id,
                    e.args,
                )

            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.state is not PollerState.IDLE:
            raise PollerStateError(state=self.state.value)

        self._task = asyncio.create_task(self._run())
        self.state = PollerState.POLLING
        logger.info("Started polling chat %s -> %s", self.viewer_id, self.peer_id)

    async def stop(self) -> None:
        if self.state is PollerState.STOPPED:
            return

        self.state = PollerState.STOPPED

        if self._task is None:
            return

        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task

        self._task = None
        logger.info("Stopped polling chat %s -> %s", self.viewer_id, self.peer_id)

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
