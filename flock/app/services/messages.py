# flock/app/services/messages.py
"""
Message and messages-collection operations.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from flock.app.core import errors
from flock.app.core.config import Settings, settings
from flock.app.core.paging import Page, resolve_limit
from flock.app.core.validation import validate_message_text
from flock.app.repositories.base import Store
from flock.app.schemas.message import MessageIn, MessageRecord, MessageResponse
from flock.app.schemas.user import UserRecord, UserResponse
from flock.app.services import visibility

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class MessageService:

    def __init__(self, store: Store, config: Settings = settings):
        self.users = store.users
        self.messages = store.messages
        self.config = config

    async def _present(self, message: MessageRecord, caller: UserRecord,
                       owners: Optional[Dict[int, Optional[UserRecord]]] = None) -> MessageResponse:
        owners = {} if owners is None else owners
        if message.user_id not in owners:
            owners[message.user_id] = caller if message.user_id == caller.id else await self.users.get(message.user_id)

        owner = owners[message.user_id]
        if owner is None:
            # Author deleted while the message survived
            presented = UserResponse(id=message.user_id)
        else:
            presented = visibility.present_user(owner, caller.id, self.config.MASK)
        return MessageResponse(id=message.id, text=message.text, date=message.date, owner=presented)

    def _check_text(self, text: Optional[str]) -> None:
        if not validate_message_text(text, self.config.MESSAGE_MAX_LENGTH):
            raise errors.invalid_field(
                "invalidMessage",
                f"Message text must be between 1 and {self.config.MESSAGE_MAX_LENGTH} characters",
            )

    async def read(self, caller: UserRecord, message_id: int) -> MessageResponse:
        message = await self.messages.get(message_id)
        if message is None or not visibility.can_read_message(caller.id, message.user_id):
            raise errors.message_not_found(message_id)
        return await self._present(message, caller)

    async def create(self, caller: UserRecord, body: Optional[MessageIn]) -> MessageResponse:
        if body is None:
            raise errors.invalid_request()
        self._check_text(body.text)

        message = await self.messages.insert(visibility.claim_new_message(body, caller.id, utcnow()))
        logger.info("User %s posted message %s", caller.id, message.id)
        return await self._present(message, caller)

    async def update(self, caller: UserRecord, message_id: int, body: Optional[MessageIn]) -> MessageResponse:
        """
        Replace the message wholesale. The same call creates the message
        when `message_id` is not stored yet.
        """
        if body is None:
            raise errors.invalid_request()
        visibility.ensure_message_owner(body.owner.id if body.owner else None, caller.id, "edit")

        existing = await self.messages.get(message_id)
        if existing is not None:
            visibility.ensure_message_owner(existing.user_id, caller.id, "edit")
        self._check_text(body.text)

        message = await self.messages.insert(MessageRecord(
            id=message_id,
            text=body.text,
            date=existing.date if existing is not None else utcnow(),
            user_id=caller.id,
        ))
        return await self._present(message, caller)

    async def delete(self, caller: UserRecord, message_id: int) -> None:
        message = await self.messages.get(message_id)
        if message is None:
            raise errors.message_not_found(message_id)
        visibility.ensure_message_owner(message.user_id, caller.id, "delete")

        await self.messages.delete(message_id)
        logger.info("User %s deleted message %s", caller.id, message_id)

    async def list_for_user(self, caller: UserRecord, user_id: Optional[int] = None,
                            limit: Optional[int] = None, cursor: Optional[str] = None) -> Page[MessageResponse]:
        """Messages of `user_id`, or of the caller when no user is given."""
        size = resolve_limit(limit, self.config.DEFAULT_PAGE_SIZE, self.config.MAX_PAGE_SIZE)

        if user_id is None or user_id == caller.id:
            target, following = caller, True
        else:
            target = await self.users.get(user_id)
            following = target is not None and await self.users.is_following(caller.id, target.id)
        visibility.ensure_can_list_messages(caller.id, target, following)

        page = await self.messages.list_by_owner(target.id, size, cursor)
        owners = {target.id: target}
        return Page(
            items=[await self._present(m, caller, owners) for m in page.items],
            cursor=page.cursor,
        )
