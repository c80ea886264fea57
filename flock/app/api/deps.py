# flock/app/api/deps.py
"""
Request-scoped collaborators and the authenticated caller.

Every collaborator is provided through a dependency so tests swap them
with `app.dependency_overrides`.
"""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from flock.app.core import errors
from flock.app.core.config import settings
from flock.app.db.session import get_db
from flock.app.repositories.base import Store
from flock.app.repositories.sql import SqlStore
from flock.app.schemas.user import UserRecord
from flock.app.security.tokens import InvalidToken, read_user_id
from flock.app.services.messages import MessageService
from flock.app.services.users import ImageValidator, UserService
from flock.app.storage.blobs import BlobStore, HttpBlobStore, LocalBlobStore
from flock.app.storage.images import ImageUrlValidator

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header yields None, and the
# failure is reported as invalidAuthorization below
reusable_bearer = HTTPBearer(auto_error=False)


async def get_store(db: AsyncSession = Depends(get_db)) -> Store:
    return SqlStore(db)


@lru_cache()
def get_blob_store() -> BlobStore:
    if settings.uses_remote_bucket:
        return HttpBlobStore(
            settings.BLOB_BUCKET_URL,
            settings.BLOB_SERVING_URL,
            timeout=settings.IMAGE_CHECK_TIMEOUT,
        )
    return LocalBlobStore(
        settings.MEDIA_ROOT,
        settings.PUBLIC_BASE_URL.rstrip("/") + settings.MEDIA_URL,
    )


@lru_cache()
def get_image_validator() -> ImageValidator:
    return ImageUrlValidator(timeout=settings.IMAGE_CHECK_TIMEOUT)


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(reusable_bearer),
        store: Store = Depends(get_store),
) -> UserRecord:
    """
    Resolve the caller from "Authorization: Bearer <token>".

    Read-only: resolving twice returns the same user and changes nothing.
    """
    if credentials is None or not credentials.credentials:
        raise errors.invalid_authorization()

    try:
        user_id = read_user_id(credentials.credentials)
    except InvalidToken as e:
        logger.info("Rejected token: %s", e)
        raise errors.invalid_authorization("Invalid authorization token")

    user = await store.users.get(user_id)
    if user is None:
        raise errors.invalid_authorization("The user of this token does not exist anymore")
    return user


def get_user_service(
        store: Store = Depends(get_store),
        blobs: BlobStore = Depends(get_blob_store),
        image_validator: ImageValidator = Depends(get_image_validator),
) -> UserService:
    return UserService(store, blobs, image_validator)


def get_message_service(store: Store = Depends(get_store)) -> MessageService:
    return MessageService(store)
