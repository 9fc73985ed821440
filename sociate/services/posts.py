# sociate/services/posts.py
"""Posts, likes and comments."""

import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.db import insert_once
from sociate.errors import NotFoundError, ValidationError
from sociate.logging_config import get_logger
from sociate.models import Comment, Like, MediaType, NotificationKind, Post
from sociate.services.enrichment import comment_dto, enrich_comments, enrich_posts
from sociate.services.notifications import notify
from sociate.services.users import require_user

logger = get_logger(__name__)


def parse_media_type(media_type: Optional[str]) -> Optional[MediaType]:
    """Map the wire value to MediaType; empty means no media kind."""
    if not media_type:
        return None
    try:
        return MediaType(media_type)
    except ValueError:
        raise ValidationError(f"Invalid media type: {media_type}")


def require_post(db: Session, post_id: Optional[str]) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first() if post_id else None
    if not post:
        raise NotFoundError("Post not found")
    return post


def create_post(
    db: Session,
    author_id: Optional[str],
    caption: Optional[str] = None,
    media_url: Optional[str] = None,
    media_type: Optional[str] = None,
) -> Dict:
    """
    Create a post owned by ``author_id``.

    Caption and media are both optional here; clients insist on one of them.

    Returns:
        Enriched post with empty likes and comments
    """
    if not author_id:
        raise ValidationError("Author ID required")
    kind = parse_media_type(media_type)
    author = require_user(db, author_id)

    post = Post(
        id=str(uuid.uuid4()),
        author_id=author.id,
        caption=caption or None,
        media_url=media_url or None,
        media_type=kind,
        created_at=timeutil.now_ms(),
    )
    db.add(post)
    db.flush()
    logger.info("User %s created post %s", author_id, post.id)
    return enrich_posts(db, [post])[0]


def get_user_posts(db: Session, user_id: str) -> List[Dict]:
    """A user's posts newest first, enriched like feed entries."""
    posts = (
        db.query(Post)
        .filter(Post.author_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )
    return enrich_posts(db, posts)


def _find_like(db: Session, user_id: str, post_id: str) -> Optional[Like]:
    return db.query(Like).filter(Like.user_id == user_id, Like.post_id == post_id).first()


def like_post(db: Session, post_id: str, user_id: Optional[str]) -> Dict:
    """
    Like a post. Liking twice keeps a single like and a single notification.

    Raises:
        ValidationError: if user id is missing
        NotFoundError: if the post or user does not exist
    """
    if not user_id:
        raise ValidationError("User ID required")
    post = require_post(db, post_id)
    actor = require_user(db, user_id)

    if _find_like(db, user_id, post_id):
        return {"success": True}

    if insert_once(db, Like(user_id=user_id, post_id=post_id, created_at=timeutil.now_ms())):
        notify(db, post.author_id, NotificationKind.like, actor, post_id=post_id)
        logger.info("User %s liked post %s", user_id, post_id)
    return {"success": True}


def unlike_post(db: Session, post_id: str, user_id: Optional[str]) -> Dict:
    """Remove a like if present; unliking an unliked post succeeds."""
    if not user_id:
        raise ValidationError("User ID required")

    db.query(Like).filter(Like.user_id == user_id, Like.post_id == post_id).delete(synchronize_session=False)
    return {"success": True}


def get_comments(db: Session, post_id: str) -> List[Dict]:
    """Comments of a post oldest first, with author usernames."""
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return enrich_comments(db, comments)


def create_comment(db: Session, post_id: str, author_id: Optional[str], content: Optional[str]) -> Dict:
    """
    Append a comment to a post and notify the post's author.

    Raises:
        ValidationError: if author id or content is missing
        NotFoundError: if the post or author does not exist
    """
    if not author_id or not content:
        raise ValidationError("Author ID and content required")
    post = require_post(db, post_id)
    author = require_user(db, author_id)

    comment = Comment(
        id=str(uuid.uuid4()),
        post_id=post.id,
        author_id=author.id,
        content=content,
        created_at=timeutil.now_ms(),
    )
    db.add(comment)
    db.flush()

    notify(db, post.author_id, NotificationKind.comment, author, post_id=post.id, comment_id=comment.id)
    logger.info("User %s commented on post %s", author_id, post_id)
    return comment_dto(comment, author)
