from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, delete, false, func, or_, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from authchat.db.models import MessageModel, UserModel
from authchat.exceptions import DuplicateUserError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Row


class ChatDatabase[T: async_sessionmaker[AsyncSession]]:
    def __init__(self, engine: AsyncEngine, sessionmaker: T) -> None:
        self._engine = engine
        self._sessionmaker = sessionmaker
        self.is_closed = False

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def sessionmaker(self) -> T:
        return self._sessionmaker

    async def close(self) -> None:
        self.is_closed = True
        await self._engine.dispose()

    @staticmethod
    async def register_user(
        session: AsyncSession,
        username: str,
        email: str,
        password_hash: str,
        profile_image: str | None = None,
    ) -> UserModel:
        stmt: Any = (
            insert(UserModel)
            .values(
                username=username,
                email=email,
                password=password_hash,
                profile_image=profile_image,
            )
            .returning(UserModel)
        )

        try:
            user = await session.scalar(stmt)
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if "UNIQUE constraint failed" in str(e.orig):
                raise DuplicateUserError(username=username, email=email) from e
            raise

        return cast(UserModel, user)

    @staticmethod
    async def get_user_by_username(session: AsyncSession, username: str) -> UserModel | None:
        stmt: Any = select(UserModel).filter(UserModel.username == username)
        return await session.scalar(stmt)

    @staticmethod
    async def list_other_users(session: AsyncSession, user_id: int) -> Sequence[UserModel]:
        stmt: Any = select(UserModel).filter(UserModel.id != user_id).order_by(UserModel.id)
        return (await session.scalars(stmt)).all()

    @staticmethod
    async def send_message(
        session: AsyncSession,
        sender_id: int,
        receiver_id: int,
        text: str,
    ) -> MessageModel:
        stmt: Any = (
            insert(MessageModel)
            .values(
                sender_id=sender_id,
                receiver_id=receiver_id,
                message=text,
            )
            .returning(MessageModel)
        )

        try:
            message = await session.scalar(stmt)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise

        return cast(MessageModel, message)

    @staticmethod
    async def get_conversation(
        session: AsyncSession,
        user_id: int,
        other_user_id: int,
        after_id: int | None = None,
    ) -> Sequence[Row[tuple[MessageModel, str]]]:
        """
        Select messages exchanged between two users, oldest first.

        Rows with the same ``created_at`` keep insertion order through the id.
        """
        stmt: Any = (
            select(MessageModel, UserModel.username)
            .join(UserModel, MessageModel.sender_id == UserModel.id)
            .filter(
                or_(
                    and_(
                        MessageModel.sender_id == user_id,
                        MessageModel.receiver_id == other_user_id,
                    ),
                    and_(
                        MessageModel.sender_id == other_user_id,
                        MessageModel.receiver_id == user_id,
                    ),
                ),
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )

        if after_id is not None:
            stmt = stmt.filter(MessageModel.id > after_id)

        return (await session.execute(stmt)).all()

    @staticmethod
    async def mark_read(session: AsyncSession, sender_id: int, receiver_id: int) -> int:
        stmt: Any = (
            update(MessageModel)
            .filter(
                MessageModel.sender_id == sender_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read == false(),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        await session.commit()

        return result.rowcount

    @staticmethod
    async def get_unread_count(session: AsyncSession, user_id: int) -> int:
        stmt: Any = (
            select(func.count())
            .select_from(MessageModel)
            .filter(
                MessageModel.receiver_id == user_id,
                MessageModel.is_read == false(),
            )
        )
        return await session.scalar(stmt) or 0

    @staticmethod
    async def set_reaction(session: AsyncSession, message_id: int, reaction: str | None) -> int:
        stmt: Any = (
            update(MessageModel)
            .filter(MessageModel.id == message_id)
            .values(reaction=reaction)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        await session.commit()

        return result.rowcount

    @staticmethod
    async def delete_user(session: AsyncSession, user_id: int) -> int:
        """
        Delete a user together with every message they sent or received.

        Both statements share one transaction.
        """
        async with session.begin():
            await session.execute(
                delete(MessageModel)
                .filter(
                    or_(
                        MessageModel.sender_id == user_id,
                        MessageModel.receiver_id == user_id,
                    ),
                )
                .execution_options(synchronize_session=False),
            )
            result: Any = await session.execute(
                delete(UserModel)
                .filter(UserModel.id == user_id)
                .execution_options(synchronize_session=False),
            )

        return result.rowcount
