# flock/app/core/paging.py
"""
Keyset pagination shared by every listing.

A continuation token is the URL-safe base64 of the last id of the previous
page. Clients must treat it as opaque.
"""
import base64
import binascii
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from flock.app.core.errors import invalid_request
from flock.app.core.validation import is_id

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    cursor: Optional[str] = None


def encode_cursor(last_id: int) -> str:
    return base64.urlsafe_b64encode(str(last_id).encode("ascii")).decode("ascii").rstrip("=")


def decode_cursor(token: Optional[str]) -> Optional[int]:
    """Return the id after which the next page starts, or None for the first page."""
    if not token:
        return None
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("ascii")
    except (binascii.Error, UnicodeError):
        raise invalid_request("Invalid continuation token")
    if not is_id(raw):
        raise invalid_request("Invalid continuation token")
    return int(raw)


def paginate(items: List[T], limit: int, key=lambda item: item.id) -> Page[T]:
    """
    Cut a list fetched with ``limit + 1`` rows into a page.

    The extra row only signals that another page exists.
    """
    if len(items) > limit:
        items = items[:limit]
        return Page(items=items, cursor=encode_cursor(key(items[-1])))
    return Page(items=items, cursor=None)


def resolve_limit(limit: Optional[int], default: int, maximum: int) -> int:
    """Page size asked by the client, capped at `maximum`."""
    if limit is None:
        return default
    if limit < 1:
        raise invalid_request("limit must be a positive integer")
    return min(limit, maximum)
