from datetime import datetime, timezone

import pytest

from flock.app.core.errors import ApiError
from flock.app.schemas.message import MessageIn, OwnerRef
from flock.app.schemas.user import UserRecord
from flock.app.services import visibility

pytestmark = pytest.mark.unit


def make_user(user_id=1, login="user1"):
    return UserRecord(
        id=user_id,
        login=login,
        password="0" * 64,
        email=f"{login}@yopmail.com",
        avatar="http://img.test/a.png",
        cover_picture="http://img.test/c.png",
    )


class TestPresentUser:

    def test_owner_sees_email_but_not_password(self):
        shown = visibility.present_user(make_user(), viewer_id=1)

        assert shown.email == "user1@yopmail.com"
        assert shown.password == "*"
        assert shown.login == "user1"
        assert shown.cover_picture == "http://img.test/c.png"

    def test_other_viewer_sees_masks(self):
        shown = visibility.present_user(make_user(), viewer_id=2)

        assert shown.email == "*"
        assert shown.password == "*"
        assert shown.avatar == "http://img.test/a.png"

    def test_custom_mask(self):
        shown = visibility.present_user(make_user(), viewer_id=None, mask="hidden")

        assert shown.email == "hidden"
        assert shown.password == "hidden"

    def test_stored_record_is_untouched(self):
        user = make_user()

        visibility.present_user(user, viewer_id=2)

        assert user.email == "user1@yopmail.com"
        assert user.password == "0" * 64


def test_profile_edit_is_limited_to_oneself():
    visibility.ensure_can_edit_profile(3, 3)

    with pytest.raises(ApiError) as exc_info:
        visibility.ensure_can_edit_profile(3, 4)

    assert exc_info.value.status == 400
    assert exc_info.value.code == "unauthorizedOperation"


def test_any_caller_reads_any_message():
    assert visibility.can_read_message(1, 2)
    assert visibility.can_read_message(1, 1)


def test_claim_new_message_ignores_client_owner_id_and_date():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    body = MessageIn(id=9, text="hi", date=datetime(2000, 1, 1), owner=OwnerRef(id=5))

    record = visibility.claim_new_message(body, caller_id=1, now=now)

    assert record.id is None
    assert record.user_id == 1
    assert record.date == now
    assert record.text == "hi"


@pytest.mark.parametrize("owner_id", [2, None])
def test_message_owner_check(owner_id):
    visibility.ensure_message_owner(1, 1)

    with pytest.raises(ApiError) as exc_info:
        visibility.ensure_message_owner(owner_id, 1, "delete")

    assert exc_info.value.code == "unauthorizedOperation"
    assert "delete" in exc_info.value.message


class TestListMessagesRule:

    def test_missing_target_is_checked_first(self):
        with pytest.raises(ApiError) as exc_info:
            visibility.ensure_can_list_messages(1, None, is_following=False)

        assert exc_info.value.code == "userNotFound"
        assert exc_info.value.status == 404

    def test_own_messages_always_allowed(self):
        visibility.ensure_can_list_messages(1, make_user(1), is_following=False)

    def test_followed_user_allowed(self):
        visibility.ensure_can_list_messages(1, make_user(2, "user2"), is_following=True)

    def test_unfollowed_user_refused(self):
        with pytest.raises(ApiError) as exc_info:
            visibility.ensure_can_list_messages(1, make_user(2, "user2"), is_following=False)

        assert exc_info.value.status == 401
        assert exc_info.value.code == "unauthorizedMessages"
