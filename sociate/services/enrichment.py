"""
Row-to-wire conversion and batched enrichment.

Every enricher collects the ids it needs up front and resolves them with a
single IN-query per related table, so a page of N posts costs a constant
number of statements instead of one lookup per post.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from sociate.models import Comment, Like, Message, Notification, Post, User
from sociate.timeutil import to_iso


def users_by_id(db: Session, user_ids: Iterable[str]) -> Dict[str, User]:
    """Resolve a set of user ids in one query."""
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


def user_row(user: User) -> Dict:
    """Full user row as returned by sync/profile/search endpoints."""
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "email": user.email,
        "nickname": user.nickname,
        "dob": user.dob,
        "address": user.address,
        "bio": user.bio,
        "profilePicture": user.profile_picture,
        "createdAt": to_iso(user.created_at),
    }


def user_summary(user: Optional[User]) -> Optional[Dict]:
    """Public profile fields inlined into conversations and messages."""
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "profilePicture": user.profile_picture,
    }


def _media_type(value) -> Optional[str]:
    return value.value if value is not None else None


def comment_dto(comment: Comment, author: Optional[User]) -> Dict:
    return {
        "id": comment.id,
        "postId": comment.post_id,
        "userId": comment.author_id,
        "username": author.username if author else "",
        "text": comment.content,
        "createdAt": to_iso(comment.created_at),
    }


def post_dto(post: Post, author: Optional[User], likes: List[str], comments: List[Dict]) -> Dict:
    return {
        "id": post.id,
        "userId": post.author_id,
        "username": author.username if author else "",
        "userAvatar": (author.profile_picture or "") if author else "",
        "caption": post.caption or "",
        "mediaUrl": post.media_url,
        "mediaType": _media_type(post.media_type),
        "likes": likes,
        "comments": comments,
        "createdAt": to_iso(post.created_at),
        "visibility": "public",
        "savedBy": [],
    }


def message_dto(message: Message, sender: Optional[User]) -> Dict:
    return {
        "id": message.id,
        "conversationId": message.conversation_id,
        "senderId": message.sender_id,
        "content": message.content,
        "mediaUrl": message.media_url,
        "mediaType": _media_type(message.media_type),
        "createdAt": to_iso(message.created_at),
        "sender": user_summary(sender),
    }


def notification_dto(notification: Notification) -> Dict:
    return {
        "id": notification.id,
        "userId": notification.user_id,
        "type": notification.kind.value,
        "fromUserId": notification.from_user_id,
        "fromUsername": notification.from_username,
        "fromUserAvatar": notification.from_user_avatar or "",
        "postId": notification.post_id,
        "commentId": notification.comment_id,
        "read": bool(notification.read),
        "createdAt": to_iso(notification.created_at),
    }


def enrich_comments(db: Session, comments: List[Comment]) -> List[Dict]:
    """Attach author usernames to comments, preserving input order."""
    authors = users_by_id(db, (c.author_id for c in comments))
    return [comment_dto(c, authors.get(c.author_id)) for c in comments]


def enrich_posts(db: Session, posts: List[Post]) -> List[Dict]:
    """
    Enrich posts with likes, comments (with author usernames) and author summary.

    Args:
        db: Database session
        posts: Posts in the order they should be returned

    Returns:
        List of post DTOs, same order as the input
    """
    if not posts:
        return []

    post_ids = [p.id for p in posts]

    likes_by_post: Dict[str, List[str]] = defaultdict(list)
    like_rows = (
        db.query(Like.post_id, Like.user_id)
        .filter(Like.post_id.in_(post_ids))
        .order_by(Like.created_at.asc())
        .all()
    )
    for post_id, user_id in like_rows:
        likes_by_post[post_id].append(user_id)

    comments = (
        db.query(Comment)
        .filter(Comment.post_id.in_(post_ids))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )

    people = users_by_id(db, [p.author_id for p in posts] + [c.author_id for c in comments])

    comments_by_post: Dict[str, List[Dict]] = defaultdict(list)
    for c in comments:
        comments_by_post[c.post_id].append(comment_dto(c, people.get(c.author_id)))

    return [
        post_dto(p, people.get(p.author_id), likes_by_post[p.id], comments_by_post[p.id])
        for p in posts
    ]


def enrich_messages(db: Session, messages: List[Message]) -> List[Dict]:
    """Attach sender summaries to messages, preserving input order."""
    senders = users_by_id(db, (m.sender_id for m in messages))
    return [message_dto(m, senders.get(m.sender_id)) for m in messages]
