"""Tests for follow/unfollow idempotency and follow notifications."""

import pytest
from sqlalchemy import insert

from conftest import START_MS, make_user
from sociate.errors import NotFoundError, ValidationError
from sociate.models import Follow, Notification, NotificationKind
from sociate.services import follows
from sociate.services.follows import follow, unfollow


@pytest.fixture
def people(db):
    return make_user(db, "u1", avatar="blob://u1"), make_user(db, "u2")


def test_follow_twice_leaves_one_edge(db, people):
    assert follow(db, "u1", "u2") == {"success": True}
    assert follow(db, "u1", "u2") == {"success": True, "message": "Already following"}

    assert db.query(Follow).count() == 1


def test_follow_is_directed(db, people):
    follow(db, "u1", "u2")

    edge = db.query(Follow).one()
    assert (edge.follower_id, edge.following_id) == ("u1", "u2")


def test_follow_notifies_target_once(db, people):
    follow(db, "u1", "u2")
    follow(db, "u1", "u2")

    notification = db.query(Notification).one()
    assert notification.user_id == "u2"
    assert notification.kind == NotificationKind.follow
    assert notification.from_user_id == "u1"
    assert notification.from_username == "u1"
    assert notification.from_user_avatar == "blob://u1"
    assert notification.read is False


@pytest.mark.parametrize("follower,following", [("u1", "u1"), (None, "u2"), ("u1", None), ("", "")])
def test_invalid_follow(db, people, follower, following):
    with pytest.raises(ValidationError, match="Invalid follow request"):
        follow(db, follower, following)

    assert db.query(Follow).count() == 0
    assert db.query(Notification).count() == 0


def test_follow_unknown_user(db, people):
    with pytest.raises(NotFoundError):
        follow(db, "u1", "ghost")


def test_unfollow_missing_edge_is_success(db, people):
    assert unfollow(db, "u1", "u2") == {"success": True}
    assert db.query(Follow).count() == 0


def test_unfollow_removes_edge(db, people):
    follow(db, "u1", "u2")
    unfollow(db, "u1", "u2")

    assert db.query(Follow).count() == 0


def test_unfollow_requires_ids(db):
    with pytest.raises(ValidationError):
        unfollow(db, "u1", None)


def test_follow_committed_concurrently_is_not_duplicated(db, people, monkeypatch):
    db.execute(insert(Follow).values(follower_id="u1", following_id="u2", created_at=START_MS))
    # The other request commits after our existence check ran
    monkeypatch.setattr(follows, "_find_follow", lambda *args: None)

    assert follow(db, "u1", "u2") == {"success": True, "message": "Already following"}

    assert db.query(Follow).count() == 1
    assert db.query(Notification).count() == 0
