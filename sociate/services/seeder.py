from __future__ import annotations
import random
import uuid
from typing import Sequence
from faker import Faker
from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.models import (
    User, Post, Like, Comment, Follow, Conversation, Message, MediaType
)
from sociate.services.conversations import canonical_pair

SEED = 1337
DAY_MS = 24 * 60 * 60 * 1000

fake = Faker()


def seed_random_generators(seed: int = SEED) -> None:
    """Make `seed` runs reproducible."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)


def _new_id() -> str:
    return str(uuid.UUID(int=random.getrandbits(128), version=4))


def _recent_ms(days: int = 30) -> int:
    return timeutil.now_ms() - random.randint(0, days * DAY_MS)


def make_users(db: Session, n_users: int) -> list[User]:
    users = []
    for _ in range(n_users):
        name = fake.name()
        users.append(User(
            id=_new_id(),
            username=fake.unique.user_name(),
            name=name,
            email=fake.unique.email(),
            nickname=name.split()[0] if random.random() < 0.3 else None,
            bio=fake.sentence(nb_words=8) if random.random() < 0.5 else None,
            profile_picture=f"https://i.pravatar.cc/150?u={fake.uuid4()}",
            created_at=_recent_ms(90),
        ))
    db.add_all(users); db.flush()
    return users


def make_follows(db: Session, users: Sequence[User], max_following: int = 15) -> list[Follow]:
    edges: list[Follow] = []
    for u in users:
        others = [o for o in users if o.id != u.id]
        for target in random.sample(others, k=min(len(others), random.randint(0, max_following))):
            edges.append(Follow(follower_id=u.id, following_id=target.id, created_at=_recent_ms()))
    db.add_all(edges); db.flush()
    return edges


def make_posts(db: Session, users: Sequence[User], n_posts: int) -> list[Post]:
    posts: list[Post] = []
    for _ in range(n_posts):
        u = random.choice(users)
        has_media = random.random() < 0.4
        posts.append(Post(
            id=_new_id(),
            author_id=u.id,
            caption=fake.sentence(nb_words=random.randint(4, 16)),
            media_url=f"https://picsum.photos/seed/{random.randint(1, 10_000)}/600/600" if has_media else None,
            media_type=MediaType.image if has_media else None,
            created_at=_recent_ms(),
        ))
    db.add_all(posts); db.flush()
    return posts


def make_engagement(db: Session, posts: Sequence[Post], users: Sequence[User], max_likes: int = 20, max_comments: int = 5):
    """Scatter likes and comments; each after the post's own timestamp."""
    for p in posts:
        for u in random.sample(list(users), k=min(len(users), random.randint(0, max_likes))):
            db.add(Like(user_id=u.id, post_id=p.id, created_at=p.created_at + random.randint(1, DAY_MS)))
        for _ in range(random.randint(0, max_comments)):
            db.add(Comment(
                id=_new_id(), post_id=p.id, author_id=random.choice(users).id,
                content=fake.sentence(), created_at=p.created_at + random.randint(1, DAY_MS),
            ))
    db.flush()


def make_conversations(db: Session, users: Sequence[User], n_conversations: int, max_messages: int = 12) -> list[Conversation]:
    pairs: set[tuple[str, str]] = set()
    attempts = 0
    while len(pairs) < n_conversations and attempts < n_conversations * 10 and len(users) > 1:
        a, b = random.sample(list(users), k=2)
        pairs.add(canonical_pair(a.id, b.id))
        attempts += 1

    conversations = []
    for user1, user2 in sorted(pairs):
        conv = Conversation(id=_new_id(), user_a_id=user1, user_b_id=user2, created_at=_recent_ms())
        db.add(conv); conversations.append(conv)
        when = conv.created_at
        for _ in range(random.randint(0, max_messages)):
            when += random.randint(1_000, 3_600_000)
            db.add(Message(
                id=_new_id(), conversation_id=conv.id, sender_id=random.choice((user1, user2)),
                content=fake.sentence(), created_at=when,
            ))
    db.flush()
    return conversations
