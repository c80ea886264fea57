# flock/app/services/visibility.py
"""
Who may see and change what.

1. A user reads any profile but only edits their own.
2. Email is shown to its owner only; password is never shown.
3. Any authenticated caller reads any message.
4. A new message always belongs to its caller; only the author updates
   or deletes a message.
5. Listing another user's messages requires following them; one's own
   messages are always listed. Target existence is checked first.
"""
from datetime import datetime
from typing import Optional

from flock.app.core import errors
from flock.app.core.config import settings
from flock.app.schemas.message import MessageIn, MessageRecord
from flock.app.schemas.user import UserRecord, UserResponse


def ensure_can_edit_profile(caller_id: int, subject_id: int) -> None:
    if caller_id != subject_id:
        raise errors.unauthorized_operation("You cannot edit another user than yourself")


def present_user(user: UserRecord, viewer_id: Optional[int], mask: Optional[str] = None) -> UserResponse:
    """Outbound representation of `user` as seen by `viewer_id`."""
    mask = settings.MASK if mask is None else mask
    return UserResponse(
        id=user.id,
        login=user.login,
        avatar=user.avatar,
        cover_picture=user.cover_picture,
        email=user.email if viewer_id == user.id else mask,
        password=mask,
    )


def can_read_message(caller_id: int, owner_id: int) -> bool:
    return True


def claim_new_message(body: MessageIn, caller_id: int, now: datetime) -> MessageRecord:
    """Owner, date and id of a new message never come from the client."""
    return MessageRecord(id=None, text=body.text, date=now, user_id=caller_id)


def ensure_message_owner(owner_id: Optional[int], caller_id: int, action: str = "edit") -> None:
    if owner_id != caller_id:
        raise errors.unauthorized_operation(f"You cannot {action} a message which is not yours")


def ensure_can_list_messages(caller_id: int, target: Optional[UserRecord], is_following: bool) -> None:
    if target is None:
        raise errors.user_not_found()
    if target.id != caller_id and not is_following:
        raise errors.unauthorized_messages()
