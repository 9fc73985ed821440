"""Tests for notification generation, listing and read state."""

import pytest

from conftest import make_user
from sociate.errors import NotFoundError, ValidationError
from sociate.models import NotificationKind
from sociate.services import notifications, posts
from sociate.services.follows import follow


@pytest.fixture
def users(db):
    return make_user(db, "u1"), make_user(db, "u2", username="actor", avatar="blob://actor")


def test_notify_snapshots_actor(db, users):
    receiver, actor = users

    created = notifications.notify(db, receiver.id, NotificationKind.follow, actor)

    assert created.from_username == "actor"
    assert created.from_user_avatar == "blob://actor"
    assert created.read is False


def test_notify_self_is_suppressed(db, users):
    receiver, _ = users

    assert notifications.notify(db, receiver.id, NotificationKind.like, receiver, post_id="p") is None
    assert notifications.list_notifications(db, receiver.id) == []


def test_list_newest_first(db, users):
    post = posts.create_post(db, "u1", caption="x")
    follow(db, "u2", "u1")
    posts.like_post(db, post["id"], "u2")
    posts.create_comment(db, post["id"], "u2", "hey")

    listed = notifications.list_notifications(db, "u1")

    assert [n["type"] for n in listed] == ["comment", "like", "follow"]
    assert listed[0]["fromUsername"] == "actor"
    assert listed[0]["commentId"] is not None
    assert listed[1]["postId"] == post["id"]
    assert all(n["read"] is False for n in listed)


def test_unread_only_and_count(db, users):
    receiver, actor = users
    first = notifications.notify(db, receiver.id, NotificationKind.follow, actor)
    notifications.notify(db, receiver.id, NotificationKind.like, actor, post_id="p")

    assert notifications.unread_count(db, "u1") == 2
    notifications.mark_read(db, first.id)

    assert notifications.unread_count(db, "u1") == 1
    assert [n["type"] for n in notifications.list_notifications(db, "u1", unread_only=True)] == ["like"]


def test_mark_read_is_idempotent(db, users):
    receiver, actor = users
    created = notifications.notify(db, receiver.id, NotificationKind.follow, actor)

    assert notifications.mark_read(db, created.id)["read"] is True
    assert notifications.mark_read(db, created.id)["read"] is True


def test_mark_read_unknown(db):
    with pytest.raises(NotFoundError):
        notifications.mark_read(db, "nope")


def test_mark_all_read(db, users):
    receiver, actor = users
    notifications.notify(db, receiver.id, NotificationKind.follow, actor)
    notifications.notify(db, receiver.id, NotificationKind.like, actor, post_id="p")
    notifications.notify(db, actor.id, NotificationKind.follow, receiver)

    assert notifications.mark_all_read(db, "u1") == 2
    assert notifications.mark_all_read(db, "u1") == 0
    assert notifications.unread_count(db, "u1") == 0
    assert notifications.unread_count(db, "u2") == 1


def test_requires_user_id(db):
    with pytest.raises(ValidationError):
        notifications.list_notifications(db, None)
    with pytest.raises(ValidationError):
        notifications.unread_count(db, "")
