# flock/app/repositories/base.py
"""
Store interfaces consumed by the services.

The services only ever talk to these abstractions, the SQLAlchemy
implementation lives in repositories/sql.py and tests plug an in-memory
one. Every method may raise StorageError.

Listings take an opaque continuation token and return a Page whose
cursor is None on the last page.
"""
from abc import ABC, abstractmethod
from typing import Optional

from flock.app.core.paging import Page
from flock.app.schemas.message import MessageRecord
from flock.app.schemas.user import UserRecord


class UsersRepository(ABC):

    @abstractmethod
    async def get(self, user_id: int) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_by_login(self, login: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def list(self, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        ...

    @abstractmethod
    async def allocate_id(self) -> int:
        """Reserve an id for a user that is not persisted yet."""

    @abstractmethod
    async def save(self, user: UserRecord) -> UserRecord:
        """Create or overwrite the whole record (last write wins)."""

    @abstractmethod
    async def delete(self, user_id: int) -> None:
        """Idempotent: deleting a missing user is not an error."""

    # ── follow graph ───────────────────────────────────────────────────────

    @abstractmethod
    async def followed(self, user_id: int, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        """Users that `user_id` follows."""

    @abstractmethod
    async def followers(self, user_id: int, limit: int, cursor: Optional[str] = None) -> Page[UserRecord]:
        """Users following `user_id`."""

    @abstractmethod
    async def is_following(self, follower_id: int, followed_id: int) -> bool:
        ...

    @abstractmethod
    async def set_followed(self, follower_id: int, followed_id: int, followed: bool) -> None:
        """Create or remove the edge. Idempotent in both directions."""

    @abstractmethod
    async def delete_follows(self, user_id: int) -> None:
        """Remove every edge touching `user_id`."""


class MessagesRepository(ABC):

    @abstractmethod
    async def get(self, message_id: int) -> Optional[MessageRecord]:
        ...

    @abstractmethod
    async def insert(self, message: MessageRecord) -> MessageRecord:
        """
        Persist a message. Without an id a new one is allocated, with an id
        the stored record is created or overwritten.
        """

    @abstractmethod
    async def delete(self, message_id: int) -> None:
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: int, limit: int, cursor: Optional[str] = None) -> Page[MessageRecord]:
        ...

    @abstractmethod
    async def delete_by_owner(self, owner_id: int) -> int:
        """Returns the number of deleted messages."""


class Store(ABC):
    """The persistent store, as handed to every request."""
    users: UsersRepository
    messages: MessagesRepository
