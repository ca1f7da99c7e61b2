from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from authchat.sync import ConversationPoller
from authchat.types.answer_types import OK, Error, ErrorCode, UserInfo
from authchat.validation import validate_login, validate_registration

if TYPE_CHECKING:
    from authchat.store import ChatStore
    from authchat.sync.poller import OnUpdate
    from authchat.types.answer_types import Result

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

NOT_LOGGED_IN_MESSAGE = "Not logged in"
NO_CHAT_SELECTED_MESSAGE = "No chat selected"
EMPTY_MESSAGE = "Message cannot be empty"


class AppSession:
    """
    State shared by the screens of one running app.

    Holds the logged in user and the selected chat partner and drives the
    login, register, logout and account deletion flows against a store.
    """

    def __init__(self, store: ChatStore) -> None:
        self.store = store
        self.current_user: UserInfo | None = None
        self.selected_user: UserInfo | None = None

    @property
    def is_logged_in(self) -> bool:
        return self.current_user is not None

    def _not_logged_in(self) -> Error:
        return Error(code=ErrorCode.NOT_LOGGED_IN, message=NOT_LOGGED_IN_MESSAGE)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> Result:
        if error := validate_registration(username, email, password, confirm_password):
            return error

        return await self.store.register(username.strip(), email.strip(), password)

    async def login(self, username: str, password: str) -> Result:
        if error := validate_login(username, password):
            return error

        result = await self.store.login(username.strip(), password)

        if isinstance(result, OK) and isinstance(result.data, UserInfo):
            self.current_user = result.data
            logger.info("User %s logged in", result.data.username)

        return result

    def logout(self) -> None:
        self.current_user = None
        self.selected_user = None

    async def delete_account(self) -> Result:
        if self.current_user is None:
            return self._not_logged_in()

        result = await self.store.delete_account(self.current_user.id)

        if isinstance(result, OK):
            self.logout()

        return result

    async def chat_partners(self) -> list[UserInfo]:
        if self.current_user is None:
            return []

        return await self.store.list_others(self.current_user.id)

    async def unread_count(self) -> int:
        if self.current_user is None:
            return 0

        return await self.store.get_unread_count(self.current_user.id)

    def open_chat(self, peer: UserInfo, on_update: OnUpdate) -> ConversationPoller:
        if self.current_user is None:
            msg = "Cannot open a chat without a logged in user"
            raise RuntimeError(msg)

        self.selected_user = peer

        return ConversationPoller(
            store=self.store,
            viewer_id=self.current_user.id,
            peer_id=peer.id,
            on_update=on_update,
            interval=self.store.settings.poll_interval,
        )

    def close_chat(self) -> None:
        self.selected_user = None

    async def send(self, body: str) -> Result:
        if self.current_user is None:
            return self._not_logged_in()

        if self.selected_user is None:
            return Error(code=ErrorCode.VALIDATION, message=NO_CHAT_SELECTED_MESSAGE)

        if not body.strip():
            return Error(code=ErrorCode.VALIDATION, message=EMPTY_MESSAGE)

        return await self.store.send(self.current_user.id, self.selected_user.id, body.strip())
