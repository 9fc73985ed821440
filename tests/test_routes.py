"""HTTP-level tests: envelope, CORS, cache policy, error mapping and end-to-end flows."""

from unittest.mock import patch

import pytest

from conftest import sync_payload
from sociate import config


@pytest.fixture
def two_users(client):
    client.post("/api/users/sync", json=sync_payload("u1", "annika"))
    client.post("/api/users/sync", json=sync_payload("u2", "joanne"))


class TestEnvelope:
    """Router-level behaviour shared by every endpoint."""

    def test_preflight_is_204_with_cors(self, client):
        response = client.options("/api/anything/at/all")

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "OPTIONS" in response.headers["Access-Control-Allow-Methods"]
        assert "Authorization" in response.headers["Access-Control-Allow-Headers"]

    def test_unknown_route(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_wrong_method_is_not_found(self, client):
        response = client.delete("/api/follow")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_unexpected_error_is_500_with_message(self, client):
        with patch("sociate.routes.users.users.get_user_profile", side_effect=RuntimeError("store exploded")):
            response = client.get("/api/users/u1")

        assert response.status_code == 500
        assert response.json() == {"error": "store exploded"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Cache-Control"] == "no-store"

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/api/follow", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/users/sync", json={"id": "u1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_not_found_entity(self, client):
        response = client.get("/api/users/ghost")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_username_conflict_is_409(self, client, two_users):
        response = client.post("/api/users/sync", json=sync_payload("u3", "annika"))

        assert response.status_code == 409


class TestCachePolicy:

    def test_profile_is_short_cacheable(self, client, two_users):
        response = client.get("/api/users/u1")

        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "max-age=5"
        assert response.json()["followersCount"] == 0

    def test_profile_by_username_is_short_cacheable(self, client, two_users):
        response = client.get("/api/users/by-username/joanne")

        assert response.json()["id"] == "u2"
        assert response.headers["Cache-Control"] == "max-age=5"

    def test_feed_and_comments_are_short_cacheable(self, client, two_users):
        post = client.post("/api/posts", json={"authorId": "u1", "caption": "x"}).json()

        assert client.get("/api/feed").headers["Cache-Control"] == "max-age=5"
        assert client.get(f"/api/posts/{post['id']}/comments").headers["Cache-Control"] == "max-age=5"

    def test_mutations_are_no_store(self, client, two_users):
        response = client.post("/api/follow", json={"followerId": "u1", "followingId": "u2"})

        assert response.json() == {"success": True}
        assert response.headers["Cache-Control"] == "no-store"

    def test_uncached_reads_are_no_store(self, client, two_users):
        assert client.get("/api/users/u1/followers").headers["Cache-Control"] == "no-store"


class TestEndpoints:

    def test_search(self, client, two_users):
        response = client.get("/api/users/search", params={"q": "ANN"})

        assert response.status_code == 200
        assert {u["id"] for u in response.json()} == {"u1", "u2"}

    def test_search_requires_query(self, client):
        response = client.get("/api/users/search")

        assert response.status_code == 400
        assert response.json() == {"error": "Query parameter required"}

    def test_follow_lists_and_user_posts(self, client, two_users):
        client.post("/api/follow", json={"followerId": "u2", "followingId": "u1"})
        client.post("/api/posts", json={"authorId": "u1", "caption": "one"})

        assert [u["id"] for u in client.get("/api/users/u1/followers").json()] == ["u2"]
        assert [u["id"] for u in client.get("/api/users/u2/following").json()] == ["u1"]
        assert [p["caption"] for p in client.get("/api/users/u1/posts").json()] == ["one"]

    def test_self_follow_rejected(self, client, two_users):
        response = client.post("/api/follow", json={"followerId": "u1", "followingId": "u1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid follow request"}

    def test_unfollow_without_edge(self, client, two_users):
        response = client.post("/api/unfollow", json={"followerId": "u1", "followingId": "u2"})

        assert response.json() == {"success": True}

    def test_posts_get_is_feed_alias(self, client, two_users):
        client.post("/api/posts", json={"authorId": "u1", "caption": "x"})

        assert client.get("/api/posts").json() == client.get("/api/feed").json()

    def test_comment_round_trip(self, client, two_users):
        post = client.post("/api/posts", json={"authorId": "u1", "caption": "x"}).json()

        created = client.post(f"/api/posts/{post['id']}/comments", json={"authorId": "u2", "content": "nice"})
        listed = client.get(f"/api/posts/{post['id']}/comments").json()

        assert created.status_code == 200
        assert listed == [created.json()]
        assert listed[0]["username"] == "joanne"

    def test_messages_limit_must_be_integer(self, client, two_users):
        conv = client.post("/api/conversations", json={"userAId": "u1", "userBId": "u2"}).json()

        response = client.get(f"/api/conversations/{conv['id']}/messages", params={"limit": "lots"})

        assert response.status_code == 400

    def test_non_participant_cannot_send(self, client, two_users):
        client.post("/api/users/sync", json=sync_payload("u3", "mallory"))
        conv = client.post("/api/conversations", json={"userAId": "u1", "userBId": "u2"}).json()

        response = client.post(f"/api/conversations/{conv['id']}/messages", json={"senderId": "u3", "content": "hi"})

        assert response.status_code == 403

    def test_notification_endpoints(self, client, two_users):
        client.post("/api/follow", json={"followerId": "u2", "followingId": "u1"})

        listed = client.get("/api/notifications", params={"userId": "u1"}).json()
        assert [n["type"] for n in listed] == ["follow"]
        assert client.get("/api/notifications/unread-count", params={"userId": "u1"}).json() == {"count": 1}

        marked = client.post(f"/api/notifications/{listed[0]['id']}/read")
        assert marked.json()["read"] is True
        assert client.get("/api/notifications", params={"userId": "u1", "unreadOnly": "true"}).json() == []

        all_read = client.post("/api/notifications/read-all", json={"userId": "u1"})
        assert all_read.json() == {"success": True, "updated": 0}

    def test_unknown_notification(self, client):
        assert client.post("/api/notifications/nope/read").status_code == 404


class TestActorCheck:
    """Bearer ids are advisory unless enforcement is switched on."""

    def test_mismatch_allowed_by_default(self, client, two_users):
        response = client.post(
            "/api/follow",
            json={"followerId": "u1", "followingId": "u2"},
            headers={"Authorization": "Bearer u2"},
        )

        assert response.status_code == 200

    def test_mismatch_rejected_when_enforced(self, client, two_users, monkeypatch):
        monkeypatch.setattr(config, "AUTH_ENFORCE_ACTOR", True)

        response = client.post(
            "/api/follow",
            json={"followerId": "u1", "followingId": "u2"},
            headers={"Authorization": "Bearer u2"},
        )

        assert response.status_code == 403
        assert "error" in response.json()

    def test_matching_bearer_allowed_when_enforced(self, client, two_users, monkeypatch):
        monkeypatch.setattr(config, "AUTH_ENFORCE_ACTOR", True)

        response = client.post(
            "/api/follow",
            json={"followerId": "u1", "followingId": "u2"},
            headers={"Authorization": "Bearer u1"},
        )

        assert response.status_code == 200


class TestEndToEnd:

    def test_follow_like_feed_notification(self, client):
        client.post("/api/users/sync", json=sync_payload("U1", "one"))
        post = client.post("/api/posts", json={"authorId": "U1", "caption": "hello"}).json()
        client.post("/api/users/sync", json=sync_payload("U2", "two"))
        assert client.post("/api/follow", json={"followerId": "U2", "followingId": "U1"}).status_code == 200
        assert client.post(f"/api/posts/{post['id']}/like", json={"userId": "U2"}).json() == {"success": True}

        feed = client.get("/api/feed", params={"userId": "U2"}).json()

        assert [p["id"] for p in feed] == [post["id"]]
        assert feed[0]["caption"] == "hello"
        assert feed[0]["likes"] == ["U2"]

        notes = client.get("/api/notifications", params={"userId": "U1"}).json()
        likes = [n for n in notes if n["type"] == "like"]
        assert len(likes) == 1
        assert likes[0]["fromUserId"] == "U2"
        assert likes[0]["postId"] == post["id"]

    def test_conversation_and_messages(self, client, two_users):
        first = client.post("/api/conversations", json={"userAId": "u1", "userBId": "u2"}).json()
        second = client.post("/api/conversations", json={"userAId": "u2", "userBId": "u1"}).json()
        assert first["id"] == second["id"]

        client.post(f"/api/conversations/{first['id']}/messages", json={"senderId": "u1", "content": "hi"})
        client.post(f"/api/conversations/{first['id']}/messages", json={"senderId": "u2", "content": "yo"})

        messages = client.get(f"/api/conversations/{first['id']}/messages").json()
        assert [m["content"] for m in messages] == ["hi", "yo"]
        assert messages[0]["sender"]["username"] == "annika"

        older = client.get(
            f"/api/conversations/{first['id']}/messages", params={"before": messages[1]["createdAt"]}
        ).json()
        assert [m["content"] for m in older] == ["hi"]

        inbox = client.get("/api/conversations", params={"userId": "u2"}).json()
        assert inbox[0]["otherUser"]["id"] == "u1"
        assert inbox[0]["lastMessage"]["content"] == "yo"
