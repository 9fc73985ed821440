# sociate/services/users.py
"""User sync, profile lookup with derived counters, search and follow lists."""

from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.config import SEARCH_LIMIT
from sociate.errors import ConflictError, NotFoundError, ValidationError
from sociate.logging_config import get_logger
from sociate.models import Follow, Post, User
from sociate.services.enrichment import user_row

logger = get_logger(__name__)

# Profile fields a re-sync may change; id and created_at never move.
MUTABLE_FIELDS = ("username", "name", "email", "nickname", "dob", "address", "bio", "profile_picture")


def require_user(db: Session, user_id: Optional[str]) -> User:
    """Fetch a user or raise NotFoundError."""
    user = db.query(User).filter(User.id == user_id).first() if user_id else None
    if not user:
        raise NotFoundError("User not found")
    return user


def sync_user(
    db: Session,
    user_id: Optional[str],
    username: Optional[str],
    name: Optional[str],
    email: Optional[str],
    nickname: Optional[str] = None,
    dob: Optional[str] = None,
    address: Optional[str] = None,
    bio: Optional[str] = None,
    profile_picture: Optional[str] = None,
) -> Dict:
    """
    Create or update a user from the identity source.

    An existing row is updated in place; otherwise it is inserted with
    created_at = now. Optional fields left empty are stored as NULL, so
    repeating a call with the same input leaves the same stored state.

    Raises:
        ValidationError: if id, username, name or email is missing
        ConflictError: if the username belongs to a different user
    """
    if not user_id or not username or not name or not email:
        raise ValidationError("Missing required fields")

    holder = db.query(User.id).filter(User.username == username).first()
    if holder and holder.id != user_id:
        raise ConflictError(f"Username {username} is already taken")

    values = {
        "username": username,
        "name": name,
        "email": email,
        "nickname": nickname or None,
        "dob": dob or None,
        "address": address or None,
        "bio": bio or None,
        "profile_picture": profile_picture or None,
    }

    user = db.query(User).filter(User.id == user_id).first()
    if user:
        for field in MUTABLE_FIELDS:
            setattr(user, field, values[field])
        logger.info("Updated user %s", user_id)
    else:
        user = User(id=user_id, created_at=timeutil.now_ms(), **values)
        db.add(user)
        logger.info("Created user %s (@%s)", user_id, username)

    db.flush()
    return user_row(user)


def _profile(db: Session, user: User) -> Dict:
    followers = db.query(func.count()).select_from(Follow).filter(Follow.following_id == user.id).scalar()
    following = db.query(func.count()).select_from(Follow).filter(Follow.follower_id == user.id).scalar()
    posts = db.query(func.count()).select_from(Post).filter(Post.author_id == user.id).scalar()

    profile = user_row(user)
    profile.update({
        "followersCount": followers or 0,
        "followingCount": following or 0,
        "postsCount": posts or 0,
    })
    return profile


def get_user_profile(db: Session, user_id: Optional[str]) -> Dict:
    """User row plus follower, following and post counts computed at request time."""
    if not user_id:
        raise ValidationError("User ID required")
    return _profile(db, require_user(db, user_id))


def get_user_profile_by_username(db: Session, username: Optional[str]) -> Dict:
    if not username:
        raise ValidationError("Username required")
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFoundError("User not found")
    return _profile(db, user)


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_users(db: Session, query: Optional[str], limit: int = SEARCH_LIMIT) -> List[Dict]:
    """
    Case-insensitive substring search over username, name and nickname.

    Returns the first ``limit`` matches in store order; there is no ranking,
    so these are not necessarily the best matches.
    """
    if not query or not query.strip():
        raise ValidationError("Query parameter required")

    pattern = _like_pattern(query.strip())
    users = (
        db.query(User)
        .filter(
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.name.ilike(pattern, escape="\\"),
                User.nickname.ilike(pattern, escape="\\"),
            )
        )
        .limit(limit)
        .all()
    )
    return [user_row(u) for u in users]


def get_followers(db: Session, user_id: str) -> List[Dict]:
    """Users who follow ``user_id``."""
    users = (
        db.query(User)
        .join(Follow, User.id == Follow.follower_id)
        .filter(Follow.following_id == user_id)
        .all()
    )
    return [user_row(u) for u in users]


def get_following(db: Session, user_id: str) -> List[Dict]:
    """Users that ``user_id`` follows."""
    users = (
        db.query(User)
        .join(Follow, User.id == Follow.following_id)
        .filter(Follow.follower_id == user_id)
        .all()
    )
    return [user_row(u) for u in users]
