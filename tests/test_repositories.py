"""
SqlStore against a throw-away SQLite file (aiosqlite).
"""
import asyncio
from datetime import datetime, timezone

import pytest

from flock.app.core.config import Settings
from flock.app.core.errors import ApiError, StorageError
from flock.app.db.init_db import init_models
from flock.app.db.session import create_engine_for, create_session_factory
from flock.app.repositories.sql import SqlStore
from flock.app.schemas.message import MessageRecord
from flock.app.schemas.user import UserRecord

pytestmark = pytest.mark.integration


@pytest.fixture(scope="function")
def sql_engine(tmp_path):
    config = Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'flock.db'}")
    engine = create_engine_for(config)
    asyncio.run(init_models(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture(scope="function")
def run(sql_engine):
    """Run `scenario(store)` on a fresh session."""
    factory = create_session_factory(sql_engine)

    def _run(scenario):
        async def main():
            async with factory() as session:
                return await scenario(SqlStore(session))
        return asyncio.run(main())

    return _run


async def new_user(store, login):
    user_id = await store.users.allocate_id()
    return await store.users.save(UserRecord(
        id=user_id, login=login, password="x" * 64, email=f"{login}@yopmail.com",
    ))


def test_database_url_is_normalized_for_aiosqlite(sql_engine):
    assert sql_engine.url.drivername == "sqlite+aiosqlite"


class TestUsersRepository:

    def test_allocate_ids_are_distinct(self, run):
        async def scenario(store):
            return [await store.users.allocate_id() for _ in range(3)]

        ids = run(scenario)

        assert len(set(ids)) == 3
        assert ids == sorted(ids)

    def test_save_and_lookups(self, run):
        async def scenario(store):
            saved = await new_user(store, "user1")
            return (
                saved,
                await store.users.get(saved.id),
                await store.users.get_by_login("user1"),
                await store.users.get_by_email("user1@yopmail.com"),
                await store.users.get(saved.id + 100),
            )

        saved, by_id, by_login, by_email, missing = run(scenario)

        assert by_id == saved
        assert by_login == saved
        assert by_email == saved
        assert missing is None

    def test_save_overwrites_whole_record(self, run):
        async def scenario(store):
            user = await new_user(store, "user1")
            await store.users.save(user.model_copy(update={"login": "renamed", "avatar": "http://a/b.png"}))
            return await store.users.get(user.id)

        user = run(scenario)

        assert user.login == "renamed"
        assert user.avatar == "http://a/b.png"

    def test_duplicate_login_is_a_conflict(self, run):
        async def scenario(store):
            await new_user(store, "user1")
            user_id = await store.users.allocate_id()
            await store.users.save(UserRecord(
                id=user_id, login="user1", password="x", email="other@yopmail.com",
            ))

        with pytest.raises(StorageError) as exc_info:
            run(scenario)

        assert exc_info.value.status == 409
        assert exc_info.value.code == "storageConflict"

    def test_delete_is_idempotent(self, run):
        async def scenario(store):
            user = await new_user(store, "user1")
            await store.users.delete(user.id)
            await store.users.delete(user.id)
            return await store.users.get(user.id)

        assert run(scenario) is None

    def test_list_pages_by_id(self, run):
        async def scenario(store):
            for i in range(5):
                await new_user(store, f"user{i}")
            first = await store.users.list(2)
            second = await store.users.list(2, first.cursor)
            third = await store.users.list(2, second.cursor)
            return first, second, third

        first, second, third = run(scenario)

        logins = [u.login for page in (first, second, third) for u in page.items]
        assert logins == [f"user{i}" for i in range(5)]
        assert first.cursor and second.cursor
        assert third.cursor is None

    def test_bad_cursor(self, run):
        async def scenario(store):
            await store.users.list(2, "!!!")

        with pytest.raises(ApiError) as exc_info:
            run(scenario)

        assert exc_info.value.code == "invalidRequest"


class TestFollowGraph:

    def test_follow_edges(self, run):
        async def scenario(store):
            a = await new_user(store, "user_a")
            b = await new_user(store, "user_b")
            c = await new_user(store, "user_c")
            await store.users.set_followed(a.id, b.id, True)
            await store.users.set_followed(a.id, b.id, True)
            await store.users.set_followed(c.id, b.id, True)
            return (
                a, b, c,
                await store.users.followed(a.id, 10),
                await store.users.followers(b.id, 10),
                await store.users.is_following(a.id, b.id),
                await store.users.is_following(b.id, a.id),
            )

        a, b, c, followed, followers, a_follows_b, b_follows_a = run(scenario)

        assert [u.id for u in followed.items] == [b.id]
        assert [u.id for u in followers.items] == [a.id, c.id]
        assert a_follows_b is True
        assert b_follows_a is False

    def test_unfollow_and_delete_follows(self, run):
        async def scenario(store):
            a = await new_user(store, "user_a")
            b = await new_user(store, "user_b")
            await store.users.set_followed(a.id, b.id, True)
            await store.users.set_followed(b.id, a.id, True)
            await store.users.set_followed(a.id, b.id, False)
            await store.users.set_followed(a.id, b.id, False)
            after_unfollow = await store.users.is_following(a.id, b.id)
            await store.users.delete_follows(a.id)
            return after_unfollow, await store.users.is_following(b.id, a.id)

        after_unfollow, b_follows_a = run(scenario)

        assert after_unfollow is False
        assert b_follows_a is False


class TestMessagesRepository:

    def test_insert_allocates_id_and_keeps_utc(self, run):
        date = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

        async def scenario(store):
            created = await store.messages.insert(MessageRecord(text="hello", date=date, user_id=1))
            return created, await store.messages.get(created.id)

        created, stored = run(scenario)

        assert created.id is not None
        assert stored.text == "hello"
        assert stored.user_id == 1
        assert stored.date == date
        assert stored.date.tzinfo is not None

    def test_insert_with_id_upserts(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            await store.messages.insert(MessageRecord(id=42, text="v1", date=date, user_id=1))
            await store.messages.insert(MessageRecord(id=42, text="v2", date=date, user_id=1))
            return await store.messages.get(42)

        assert run(scenario).text == "v2"

    def test_list_and_delete_by_owner(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            for i in range(3):
                await store.messages.insert(MessageRecord(text=f"m{i}", date=date, user_id=1))
            await store.messages.insert(MessageRecord(text="other", date=date, user_id=2))
            first = await store.messages.list_by_owner(1, 2)
            rest = await store.messages.list_by_owner(1, 2, first.cursor)
            removed = await store.messages.delete_by_owner(1)
            left = await store.messages.list_by_owner(1, 10)
            others = await store.messages.list_by_owner(2, 10)
            return first, rest, removed, left, others

        first, rest, removed, left, others = run(scenario)

        assert [m.text for m in first.items + rest.items] == ["m0", "m1", "m2"]
        assert rest.cursor is None
        assert removed == 3
        assert left.items == []
        assert [m.text for m in others.items] == ["other"]

    def test_delete(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            created = await store.messages.insert(MessageRecord(text="bye", date=date, user_id=1))
            await store.messages.delete(created.id)
            await store.messages.delete(created.id)
            return await store.messages.get(created.id)

        assert run(scenario) is None

    def test_deleted_id_is_not_reused(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            first = await store.messages.insert(MessageRecord(text="a", date=date, user_id=1))
            last = await store.messages.insert(MessageRecord(text="b", date=date, user_id=1))
            await store.messages.delete(last.id)
            again = await store.messages.insert(MessageRecord(text="c", date=date, user_id=1))
            return first.id, last.id, again.id

        ids = run(scenario)

        assert len(set(ids)) == 3
        assert ids[2] > ids[1]

    def test_allocated_id_skips_explicit_upserts(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            await store.messages.insert(MessageRecord(id=1, text="kept", date=date, user_id=1))
            created = await store.messages.insert(MessageRecord(text="new", date=date, user_id=1))
            return created, await store.messages.get(1)

        created, kept = run(scenario)

        assert created.id != 1
        assert kept.text == "kept"

    def test_message_and_user_ids_do_not_collide(self, run):
        date = datetime(2024, 5, 1, tzinfo=timezone.utc)

        async def scenario(store):
            user = await new_user(store, "user1")
            message = await store.messages.insert(MessageRecord(text="hi", date=date, user_id=user.id))
            return user.id, message.id

        user_id, message_id = run(scenario)

        assert message_id > user_id
