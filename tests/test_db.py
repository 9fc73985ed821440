"""Tests for the savepoint insert used by every idempotent mutation."""

from sqlalchemy import insert

from conftest import START_MS, make_user
from sociate.db import insert_once
from sociate.models import Follow, User


def test_inserts_new_row(db):
    make_user(db, "u1")
    make_user(db, "u2")

    assert insert_once(db, Follow(follower_id="u1", following_id="u2", created_at=START_MS)) is True
    assert db.query(Follow).count() == 1


def test_duplicate_key_is_a_no_op(db):
    make_user(db, "u1")
    make_user(db, "u2")
    # Written by another request, so it is not in this session's identity map
    db.execute(insert(Follow).values(follower_id="u1", following_id="u2", created_at=START_MS))

    inserted = insert_once(db, Follow(follower_id="u1", following_id="u2", created_at=START_MS + 1))

    assert inserted is False
    edge = db.query(Follow).one()
    assert edge.created_at == START_MS


def test_session_usable_after_duplicate(db):
    make_user(db, "u1")
    make_user(db, "u2")
    db.execute(insert(Follow).values(follower_id="u1", following_id="u2", created_at=START_MS))
    insert_once(db, Follow(follower_id="u1", following_id="u2", created_at=START_MS))

    make_user(db, "u3")
    assert insert_once(db, Follow(follower_id="u3", following_id="u1", created_at=START_MS)) is True

    assert db.query(User).count() == 3
    assert db.query(Follow).count() == 2
