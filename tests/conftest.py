"""
Test infrastructure: an in-memory store implementing the repository
interfaces, a fake bucket, a fake image checker, and a TestClient wired
to them through dependency overrides.
"""
from typing import Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from flock.app.api import deps
from flock.app.core.errors import StorageError
from flock.app.core.paging import Page, decode_cursor, paginate
from flock.app.main import app
from flock.app.repositories.base import MessagesRepository, Store, UsersRepository
from flock.app.schemas.message import MessageRecord
from flock.app.schemas.user import UserRecord
from flock.app.security.tokens import read_user_id
from flock.app.storage.blobs import BlobStore


# ==================== In-memory store ====================

def _page(rows, limit: int, cursor: Optional[str]) -> Page:
    after = decode_cursor(cursor)
    rows = sorted(rows, key=lambda row: row.id)
    if after is not None:
        rows = [row for row in rows if row.id > after]
    return paginate([row.model_copy() for row in rows[:limit + 1]], limit)


class MemoryUsersRepository(UsersRepository):

    def __init__(self):
        self.rows: Dict[int, UserRecord] = {}
        self.edges: Set[Tuple[int, int]] = set()
        self.next_id = 1

    async def get(self, user_id):
        row = self.rows.get(user_id)
        return row.model_copy() if row else None

    async def get_by_login(self, login):
        return next((u.model_copy() for u in self.rows.values() if u.login == login), None)

    async def get_by_email(self, email):
        return next((u.model_copy() for u in self.rows.values() if u.email == email), None)

    async def list(self, limit, cursor=None):
        return _page(self.rows.values(), limit, cursor)

    async def allocate_id(self):
        allocated = self.next_id
        self.next_id += 1
        return allocated

    async def save(self, user):
        self.rows[user.id] = user.model_copy()
        return user.model_copy()

    async def delete(self, user_id):
        self.rows.pop(user_id, None)

    async def followed(self, user_id, limit, cursor=None):
        rows = [self.rows[b] for (a, b) in self.edges if a == user_id and b in self.rows]
        return _page(rows, limit, cursor)

    async def followers(self, user_id, limit, cursor=None):
        rows = [self.rows[a] for (a, b) in self.edges if b == user_id and a in self.rows]
        return _page(rows, limit, cursor)

    async def is_following(self, follower_id, followed_id):
        return (follower_id, followed_id) in self.edges

    async def set_followed(self, follower_id, followed_id, followed):
        if followed:
            self.edges.add((follower_id, followed_id))
        else:
            self.edges.discard((follower_id, followed_id))

    async def delete_follows(self, user_id):
        self.edges = {(a, b) for (a, b) in self.edges if user_id not in (a, b)}


class MemoryMessagesRepository(MessagesRepository):

    def __init__(self):
        self.rows: Dict[int, MessageRecord] = {}
        self.next_id = 100

    async def get(self, message_id):
        row = self.rows.get(message_id)
        return row.model_copy() if row else None

    async def insert(self, message):
        if message.id is None:
            message = message.model_copy(update={"id": self.next_id})
        self.next_id = max(self.next_id, message.id) + 1
        self.rows[message.id] = message.model_copy()
        return message.model_copy()

    async def delete(self, message_id):
        self.rows.pop(message_id, None)

    async def list_by_owner(self, owner_id, limit, cursor=None):
        return _page([m for m in self.rows.values() if m.user_id == owner_id], limit, cursor)

    async def delete_by_owner(self, owner_id):
        doomed = [m.id for m in self.rows.values() if m.user_id == owner_id]
        for message_id in doomed:
            del self.rows[message_id]
        return len(doomed)


class MemoryStore(Store):

    def __init__(self):
        self.users = MemoryUsersRepository()
        self.messages = MemoryMessagesRepository()


# ==================== Image collaborators ====================

class FakeBlobStore(BlobStore):

    def __init__(self):
        super().__init__("https://storage.test/bucket/")
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.deleted: List[str] = []
        self.failure: Optional[StorageError] = None

    def put(self, data, content_type, key):
        if self.failure is not None:
            raise self.failure
        self.objects[key] = (data, content_type)
        return self.url_for(key)

    def delete(self, key):
        if self.failure is not None:
            raise self.failure
        self.objects.pop(key, None)
        self.deleted.append(key)


class FakeImageValidator:
    """Only URLs registered in `images` are images."""

    def __init__(self):
        self.images: Set[str] = set()
        self.calls: List[str] = []

    def __call__(self, url):
        self.calls.append(url)
        return url in self.images


# ==================== Fixtures ====================

@pytest.fixture(scope="function")
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture(scope="function")
def blobs() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture(scope="function")
def image_validator() -> FakeImageValidator:
    return FakeImageValidator()


@pytest.fixture(scope="function")
def client(store, blobs, image_validator):
    """
    TestClient without the lifespan: no table creation, no database file.
    """
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_blob_store] = lambda: blobs
    app.dependency_overrides[deps.get_image_validator] = lambda: image_validator
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==================== Helpers ====================

def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, login: str, password: str = "pass1", email: Optional[str] = None) -> str:
    response = client.post("/users", json={
        "login": login,
        "password": password,
        "email": email or f"{login}@yopmail.com",
    })
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture(scope="function")
def alice(client):
    """(token, id) of a registered user."""
    token = register(client, "alice")
    return token, read_user_id(token)


@pytest.fixture(scope="function")
def bob(client):
    token = register(client, "bob1")
    return token, read_user_id(token)
