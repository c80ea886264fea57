# flock/app/repositories/sql.py
"""
SQLAlchemy (async) implementation of the store.

Every write commits on its own: a multi-step operation such as deleting a
user is a sequence of independent, re-runnable steps, not a transaction.
"""
import functools
import logging
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from flock.app.core.errors import StorageError
from flock.app.core.paging import Page, decode_cursor, paginate
from flock.app.models import Follow, IdAllocation, Message, User
from flock.app.repositories.base import MessagesRepository, Store, UsersRepository
from flock.app.schemas.message import MessageRecord
from flock.app.schemas.user import UserRecord

logger = logging.getLogger(__name__)


def translate_errors(func):
    """Turn driver failures into StorageError, rolling the session back."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Integrity error in %s: %s", func.__qualname__, e.orig)
            raise StorageError(409, "storageConflict", "The record conflicts with existing data") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Storage failure in %s: %s", func.__qualname__, e)
            raise StorageError(503, "storageUnavailable", "The data store could not complete the request") from e

    return wrapper


def _to_user(row: Optional[User]) -> Optional[UserRecord]:
    return UserRecord.model_validate(row) if row is not None else None


def _to_message(row: Optional[Message]) -> Optional[MessageRecord]:
    return MessageRecord.model_validate(row) if row is not None else None


class SqlUsersRepository(UsersRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_errors
    async def get(self, user_id: int) -> Optional[UserRecord]:
        return _to_user(await self.session.get(User, user_id))

    @translate_errors
    async def get_by_login(self, login: str) -> Optional[UserRecord]:
        result = await self.session.execute(select(User).where(User.login == login))
        return _to_user(result.scalars().first())

    @translate_errors
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        result = await self.session.execute(select(User).where(User.email == email))
        return _to_user(result.scalars().first())

    async def _page(self, query, limit: int, cursor: Optional[str]) -> Page[UserRecord]:
        after = decode_cursor(cursor)
        if after is not None:
            query = query.where(User.id > after)
        result = await self.session.execute(query.order_by(User.id).limit(limit + 1))
        return paginate([_to_user(row) for row in result.scalars().all()], limit)

    @translate_errors
    async def list(self, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        return await self._page(select(User), limit, cursor)

    @translate_errors
    async def allocate_id(self) -> int:
        allocation = IdAllocation(kind="user")
        self.session.add(allocation)
        await self.session.commit()
        return allocation.id

    @translate_errors
    async def save(self, user: UserRecord) -> UserRecord:
        row = await self.session.merge(User(**user.model_dump()))
        await self.session.commit()
        return _to_user(row)

    @translate_errors
    async def delete(self, user_id: int) -> None:
        await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.commit()

    @translate_errors
    async def followed(self, user_id: int, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        query = (
            select(User)
            .join(Follow, Follow.followed_id == User.id)
            .where(Follow.follower_id == user_id)
        )
        return await self._page(query, limit, cursor)

    @translate_errors
    async def followers(self, user_id: int, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        query = (
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.followed_id == user_id)
        )
        return await self._page(query, limit, cursor)

    @translate_errors
    async def is_following(self, follower_id: int, followed_id: int) -> bool:
        return await self.session.get(Follow, (follower_id, followed_id)) is not None

    @translate_errors
    async def set_followed(self, follower_id: int, followed_id: int, followed: bool) -> None:
        edge = await self.session.get(Follow, (follower_id, followed_id))
        if followed and edge is None:
            self.session.add(Follow(follower_id=follower_id, followed_id=followed_id))
        elif not followed and edge is not None:
            await self.session.delete(edge)
        else:
            return
        await self.session.commit()

    @translate_errors
    async def delete_follows(self, user_id: int) -> None:
        await self.session.execute(
            delete(Follow).where(or_(Follow.follower_id == user_id, Follow.followed_id == user_id))
        )
        await self.session.commit()


class SqlMessagesRepository(MessagesRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _allocate_id(self) -> int:
        # Ids come from the shared allocation table so a deleted id is never
        # handed out again; ids already taken by an explicit upsert are skipped
        while True:
            allocation = IdAllocation(kind="message")
            self.session.add(allocation)
            await self.session.flush()
            if await self.session.get(Message, allocation.id) is None:
                return allocation.id

    @translate_errors
    async def get(self, message_id: int) -> Optional[MessageRecord]:
        return _to_message(await self.session.get(Message, message_id))

    @translate_errors
    async def insert(self, message: MessageRecord) -> MessageRecord:
        fields = message.model_dump()
        if message.id is None:
            fields["id"] = await self._allocate_id()
            row = Message(**fields)
            self.session.add(row)
        else:
            row = await self.session.merge(Message(**fields))
        await self.session.commit()
        return _to_message(row)

    @translate_errors
    async def delete(self, message_id: int) -> None:
        await self.session.execute(delete(Message).where(Message.id == message_id))
        await self.session.commit()

    @translate_errors
    async def list_by_owner(self, owner_id: int, limit: int, cursor: Optional[str] = None) -> Page[MessageRecord]:
        query = select(Message).where(Message.user_id == owner_id)
        after = decode_cursor(cursor)
        if after is not None:
            query = query.where(Message.id > after)
        result = await self.session.execute(query.order_by(Message.id).limit(limit + 1))
        return paginate([_to_message(row) for row in result.scalars().all()], limit)

    @translate_errors
    async def delete_by_owner(self, owner_id: int) -> int:
        result = await self.session.execute(delete(Message).where(Message.user_id == owner_id))
        await self.session.commit()
        return result.rowcount or 0


class SqlStore(Store):

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = SqlUsersRepository(session)
        self.messages = SqlMessagesRepository(session)
