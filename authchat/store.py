from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Self

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from authchat.config import Settings
from authchat.db import ChatDatabase, apply_migrations, create_sqlite_session_pool
from authchat.exceptions import DatabaseInitError, DuplicateUserError
from authchat.security import hash_password, verify_password
from authchat.types.answer_types import OK, ChatMessage, Created, Error, ErrorCode, UserInfo

if TYPE_CHECKING:
    from types import TracebackType

    from authchat.db.models import UserModel
    from authchat.types.answer_types import Result

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

REACTION_EMOJIS = ("👍", "❤️", "😂", "😢", "😮", "😡")

DUPLICATE_USER_MESSAGE = "Username or email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
NOT_INITIALIZED_MESSAGE = "Database not initialized"


def not_initialized() -> Error:
    return Error(code=ErrorCode.NOT_INITIALIZED, message=NOT_INITIALIZED_MESSAGE)


def database_error(e: SQLAlchemyError) -> Error:
    reason = str(e.orig) if isinstance(e, DBAPIError) else str(e)
    return Error(code=ErrorCode.DATABASE, message=reason)


def user_info(user: UserModel) -> UserInfo:
    return UserInfo(
        id=user.id,
        username=user.username,
        email=user.email,
        profile_image=user.profile_image,
    )


class ChatStore:
    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize the Store Instance.

        Nothing touches the disk until :meth:`initialize` is awaited.

        :param settings: Database location and hashing cost.
        :type settings: Settings | None
        """
        self.settings = settings or Settings()
        self.schema_version = 0
        self._db: ChatDatabase | None = None

    @property
    def db(self) -> ChatDatabase | None:
        return self._db

    @property
    def is_initialized(self) -> bool:
        return self._db is not None and not self._db.is_closed

    async def initialize(self) -> int:
        if self.is_initialized:
            return self.schema_version

        engine, sessionmaker = await create_sqlite_session_pool(
            self.settings.database_url,
            echo=self.settings.echo_sql,
        )

        try:
            async with engine.connect() as connection:
                await connection.exec_driver_sql("SELECT 1")

            self.schema_version = await apply_migrations(engine)

        except SQLAlchemyError as e:
            logger.exception("Error initializing database at %s", self.settings.database_path)
            await engine.dispose()
            raise DatabaseInitError(path=self.settings.database_path) from e

        except Exception:
            await engine.dispose()
            raise

        self._db = ChatDatabase(engine, sessionmaker)
        logger.info(
            "Database %s initialized at schema version %s",
            self.settings.database_path,
            self.schema_version,
        )

        return self.schema_version

    async def close(self) -> None:
        if self._db and not self._db.is_closed:
            await self._db.close()

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        profile_image: str | None = None,
    ) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db
        password_hash = await asyncio.to_thread(
            hash_password,
            str(password),
            self.settings.scrypt_n,
        )

        try:
            async with db.sessionmaker() as session:
                user = await db.register_user(
                    session=session,
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    profile_image=profile_image,
                )

        except DuplicateUserError:
            logger.info("Registration rejected for %s: duplicate username or email", username)
            return Error(code=ErrorCode.DUPLICATE_USER, message=DUPLICATE_USER_MESSAGE)

        except SQLAlchemyError as e:
            logger.exception("Registration error: %s", e.args)
            return database_error(e)

        logger.info("Registered user %s with id %s", user.username, user.id)
        return OK(data=Created(id=user.id))

    async def login(self, username: str, password: str) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db

        try:
            async with db.sessionmaker() as session:
                user = await db.get_user_by_username(session=session, username=username)

        except SQLAlchemyError as e:
            logger.exception("Login error: %s", e.args)
            return database_error(e)

        is_valid = user is not None and await asyncio.to_thread(
            verify_password,
            str(password),
            user.password,
        )

        if not is_valid:
            logger.info("Failed login for %s", username)
            return Error(code=ErrorCode.INVALID_CREDENTIALS, message=INVALID_CREDENTIALS_MESSAGE)

        return OK(data=user_info(user))

    async def list_others(self, viewer_id: int) -> list[UserInfo]:
        if not self.is_initialized:
            return []

        db = self._db

        try:
            async with db.sessionmaker() as session:
                users = await db.list_other_users(session=session, user_id=viewer_id)

        except SQLAlchemyError as e:
            logger.exception("Error getting chat users: %s", e.args)
            return []

        return [user_info(user) for user in users]

    async def send(self, sender_id: int, receiver_id: int, body: str) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db

        try:
            async with db.sessionmaker() as session:
                message = await db.send_message(
                    session=session,
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    text=body,
                )

        except SQLAlchemyError as e:
            logger.exception("Error sending message: %s", e.args)
            return database_error(e)

        return OK(data=Created(id=message.id))

    async def get_conversation(
        self,
        user_id: int,
        other_user_id: int,
        after_id: int | None = None,
    ) -> list[ChatMessage]:
        if not self.is_initialized or not user_id or not other_user_id:
            return []

        db = self._db

        try:
            async with db.sessionmaker() as session:
                rows = await db.get_conversation(
                    session=session,
                    user_id=user_id,
                    other_user_id=other_user_id,
                    after_id=after_id,
                )

        except SQLAlchemyError as e:
            logger.exception("Error getting messages: %s", e.args)
            return []

        return [
            ChatMessage(
                id=message.id,
                sender_id=message.sender_id,
                receiver_id=message.receiver_id,
                message=message.message,
                created_at=message.created_at,
                is_read=bool(message.is_read),
                reaction=message.reaction,
                sender_username=sender_username,
            )
            for message, sender_username in rows
        ]

    async def mark_read(self, sender_id: int, receiver_id: int) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db

        try:
            async with db.sessionmaker() as session:
                await db.mark_read(session=session, sender_id=sender_id, receiver_id=receiver_id)

        except SQLAlchemyError as e:
            logger.exception("Error marking messages as read: %s", e.args)
            return database_error(e)

        return OK()

    async def get_unread_count(self, viewer_id: int) -> int:
        if not self.is_initialized:
            return 0

        db = self._db

        try:
            async with db.sessionmaker() as session:
                return await db.get_unread_count(session=session, user_id=viewer_id)

        except SQLAlchemyError as e:
            logger.exception("Error getting unread message count: %s", e.args)
            return 0

    async def set_reaction(self, message_id: int, emoji: str) -> Result:
        return await self._update_reaction(message_id, emoji)

    async def clear_reaction(self, message_id: int) -> Result:
        return await self._update_reaction(message_id, None)

    async def toggle_reaction(self, message_id: int, emoji: str, current: str | None) -> str | None:
        """Clear the reaction when ``emoji`` is already set, otherwise replace it."""
        new_reaction = None if current == emoji else emoji
        result = await self._update_reaction(message_id, new_reaction)

        if isinstance(result, Error):
            return current

        return new_reaction

    async def _update_reaction(self, message_id: int, reaction: str | None) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db

        try:
            async with db.sessionmaker() as session:
                await db.set_reaction(session=session, message_id=message_id, reaction=reaction)

        except SQLAlchemyError as e:
            logger.exception("Error updating reaction on message %s: %s", message_id, e.args)
            return database_error(e)

        return OK()

    async def delete_account(self, user_id: int) -> Result:
        if not self.is_initialized:
            return not_initialized()

        db = self._db

        try:
            async with db.sessionmaker() as session:
                deleted = await db.delete_user(session=session, user_id=user_id)

        except SQLAlchemyError as e:
            logger.exception("Error deleting user %s: %s", user_id, e.args)
            return database_error(e)

        logger.info("Deleted user %s (%s row)", user_id, deleted)
        return OK()
