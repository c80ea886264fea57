# flock/app/services/users.py
"""
User and users-collection operations.

The service receives the caller already authenticated and ids already
bound; it owns field validation, uniqueness, visibility and the calls
into the store and the image collaborators.
"""
import enum
import logging
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool

from flock.app.core import errors
from flock.app.core.config import Settings, settings
from flock.app.core.errors import ApiError, StorageError
from flock.app.core.paging import Page, resolve_limit
from flock.app.core.validation import validate_email, validate_login, validate_password
from flock.app.repositories.base import Store
from flock.app.schemas.user import Avatar, LoginRequest, UserCreate, UserRecord, UserResponse, UserUpdate
from flock.app.security.hashing import get_password_hash, gravatar_url, verify_password
from flock.app.security.tokens import create_access_token
from flock.app.services import visibility
from flock.app.storage.blobs import BlobStore
from flock.app.storage.mime_types import UnknownMimeType, base_type, extension_for

logger = logging.getLogger(__name__)

ImageValidator = Callable[[Optional[str]], bool]


class ListMode(str, enum.Enum):
    ALL = "all"
    FOLLOWED_BY = "followedBy"
    FOLLOWER_OF = "followerOf"


class UserService:

    def __init__(self, store: Store, blobs: BlobStore, image_validator: ImageValidator,
                 config: Settings = settings):
        self.users = store.users
        self.messages = store.messages
        self.blobs = blobs
        self.image_validator = image_validator
        self.config = config

    async def _is_image(self, url: Optional[str]) -> bool:
        return await run_in_threadpool(self.image_validator, url)

    def _present(self, user: UserRecord, viewer_id: int) -> UserResponse:
        return visibility.present_user(user, viewer_id, self.config.MASK)

    def _present_page(self, page: Page[UserRecord], viewer_id: int) -> Page[UserResponse]:
        return Page(items=[self._present(u, viewer_id) for u in page.items], cursor=page.cursor)

    # ── single user ────────────────────────────────────────────────────────

    async def read(self, caller: UserRecord, user_id: int) -> UserResponse:
        user = await self.users.get(user_id)
        if user is None:
            raise errors.user_not_found()
        return self._present(user, caller.id)

    async def update(self, caller: UserRecord, user_id: int, body: Optional[UserUpdate],
                     followed: Optional[bool] = None) -> UserResponse:
        """
        Apply the attributes present in `body` to the caller's own record,
        then follow or unfollow `user_id` when `followed` is given.

        Every present field is validated before anything is written; the
        first invalid one aborts the whole update.
        """
        if body is not None:
            visibility.ensure_can_edit_profile(caller.id, user_id)
            caller = await self.users.save(await self._apply_changes(caller, body))

        if followed is not None:
            await self._set_followed(caller, user_id, followed)

        return self._present(caller, caller.id)

    async def _apply_changes(self, caller: UserRecord, body: UserUpdate) -> UserRecord:
        updated = caller.model_copy()

        if body.login is not None:
            if not validate_login(body.login):
                raise errors.invalid_field("invalidLogin", "Login must be 4 to 12 letters, digits, _ or -")
            if body.login != caller.login:
                owner = await self.users.get_by_login(body.login)
                if owner is not None and owner.id != caller.id:
                    raise errors.duplicate_login()
            updated.login = body.login

        if body.password is not None:
            if not validate_password(body.password):
                raise errors.invalid_field("invalidPassword", "Password must be 4 to 12 letters, digits or _")
            updated.password = get_password_hash(body.password, caller.id)

        if body.email is not None:
            if not validate_email(body.email):
                raise errors.invalid_field("invalidEmail", "Invalid email")
            if body.email != caller.email:
                owner = await self.users.get_by_email(body.email)
                if owner is not None and owner.id != caller.id:
                    raise errors.duplicate_email()
            updated.email = body.email

        if body.avatar is not None:
            if not await self._is_image(body.avatar):
                raise errors.invalid_field("invalidAvatar", "Invalid avatar image")
            updated.avatar = body.avatar

        if body.cover_picture is not None:
            if not await self._is_image(body.cover_picture):
                raise errors.invalid_field("invalidCoverPicture", "Invalid cover picture image")
            updated.cover_picture = body.cover_picture

        return updated

    async def _set_followed(self, caller: UserRecord, user_id: int, followed: bool) -> None:
        if user_id == caller.id:
            return
        if await self.users.get(user_id) is None:
            raise errors.user_not_found()
        await self.users.set_followed(caller.id, user_id, followed)
        logger.info("User %s %s user %s", caller.id, "follows" if followed else "unfollows", user_id)

    async def upload_avatar(self, caller: UserRecord, data: bytes, content_type: Optional[str]) -> Avatar:
        try:
            extension = extension_for(content_type)
        except UnknownMimeType as e:
            raise errors.mimetype_error(str(e))
        if not data:
            raise errors.invalid_request("Empty image body")

        key = f"avatar-{caller.id}{extension}"
        try:
            url = await run_in_threadpool(self.blobs.put, data, base_type(content_type), key)
        except StorageError as e:
            raise ApiError.from_storage(e)

        await self.users.save(caller.model_copy(update={"avatar": url}))

        previous = self.blobs.key_for(caller.avatar)
        if previous is not None and previous != key:
            try:
                await run_in_threadpool(self.blobs.delete, previous)
            except StorageError as e:
                logger.warning("Could not delete old avatar %s of user %s: %s", previous, caller.id, e.message)
        return Avatar(serving_url=url)

    async def delete(self, caller: UserRecord) -> None:
        """
        Remove the caller and what hangs off it, one step at a time:
        messages, follow edges, avatar image, then the user record.

        Steps are not atomic. Each one is idempotent and the user record
        goes last, so a failed delete is resumed by sending it again with
        the same token. The first failing step aborts the rest.
        """
        removed = await self.messages.delete_by_owner(caller.id)
        await self.users.delete_follows(caller.id)

        key = self.blobs.key_for(caller.avatar)
        if key is not None and await self._is_image(caller.avatar):
            try:
                await run_in_threadpool(self.blobs.delete, key)
            except StorageError as e:
                raise ApiError.from_storage(e)

        await self.users.delete(caller.id)
        logger.info("Deleted user %s and %d messages", caller.id, removed)

    # ── collection ─────────────────────────────────────────────────────────

    async def list(self, caller: UserRecord, mode: ListMode = ListMode.ALL, target_id: Optional[int] = None,
                   limit: Optional[int] = None, cursor: Optional[str] = None) -> Page[UserResponse]:
        size = resolve_limit(limit, self.config.DEFAULT_PAGE_SIZE, self.config.MAX_PAGE_SIZE)

        if mode is ListMode.ALL:
            return self._present_page(await self.users.list(size, cursor), caller.id)

        if target_id is None:
            target_id = caller.id
        elif await self.users.get(target_id) is None:
            raise errors.user_not_found()

        if mode is ListMode.FOLLOWED_BY:
            page = await self.users.followed(target_id, size, cursor)
        else:
            page = await self.users.followers(target_id, size, cursor)
        return self._present_page(page, caller.id)

    async def create(self, body: Optional[UserCreate]) -> str:
        """Register a user and return a token bound to it."""
        if body is None:
            raise errors.invalid_request()

        if not validate_login(body.login):
            raise errors.invalid_field("invalidLogin", "Login must be 4 to 12 letters, digits, _ or -")
        if not validate_password(body.password):
            raise errors.invalid_field("invalidPassword", "Password must be 4 to 12 letters, digits or _")
        if not validate_email(body.email):
            raise errors.invalid_field("invalidEmail", "Invalid email")
        if await self.users.get_by_login(body.login) is not None:
            raise errors.duplicate_login()
        if await self.users.get_by_email(body.email) is not None:
            raise errors.duplicate_email()

        # The id salts the password hash, so it is allocated first
        user_id = await self.users.allocate_id()
        user = UserRecord(
            id=user_id,
            login=body.login,
            email=body.email,
            password=get_password_hash(body.password, user_id),
            avatar=gravatar_url(body.email),
            cover_picture="",
        )
        await self.users.save(user)
        logger.info("Created user %s", user_id)

        return create_access_token(user_id, self.config)

    async def authenticate(self, body: Optional[LoginRequest]) -> str:
        if body is None or not body.login or not body.password:
            raise errors.invalid_credentials()
        user = await self.users.get_by_login(body.login)
        if user is None or not verify_password(body.password, user.id, user.password):
            raise errors.invalid_credentials()
        return create_access_token(user.id, self.config)
