# sociate/services/notifications.py
"""Notification store: generation on like/comment/follow, listing and read state."""

import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.errors import NotFoundError, ValidationError
from sociate.logging_config import get_logger
from sociate.models import Notification, NotificationKind, User
from sociate.services.enrichment import notification_dto

logger = get_logger(__name__)


def notify(
    db: Session,
    receiver_id: str,
    kind: NotificationKind,
    actor: User,
    post_id: Optional[str] = None,
    comment_id: Optional[str] = None,
) -> Optional[Notification]:
    """
    Record a notification for ``receiver_id`` about something ``actor`` did.

    The actor's username and avatar are snapshotted on the row. Nothing is
    written when the actor is the receiver.

    Args:
        db: Database session (the caller's transaction)
        receiver_id: User who gets notified
        kind: like, comment or follow
        actor: User who performed the action
        post_id: Post the action refers to (like/comment)
        comment_id: Comment created (comment only)

    Returns:
        The new Notification, or None when suppressed
    """
    if receiver_id == actor.id:
        logger.debug("Suppressed self %s notification for %s", kind.value, actor.id)
        return None

    notification = Notification(
        id=str(uuid.uuid4()),
        user_id=receiver_id,
        kind=kind,
        from_user_id=actor.id,
        from_username=actor.username,
        from_user_avatar=actor.profile_picture,
        post_id=post_id,
        comment_id=comment_id,
        read=False,
        created_at=timeutil.now_ms(),
    )
    db.add(notification)
    db.flush()
    return notification


def list_notifications(db: Session, user_id: Optional[str], unread_only: bool = False) -> List[Dict]:
    """Notifications received by a user, newest first."""
    if not user_id:
        raise ValidationError("User ID required")

    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    rows = query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
    return [notification_dto(n) for n in rows]


def unread_count(db: Session, user_id: Optional[str]) -> int:
    if not user_id:
        raise ValidationError("User ID required")
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: str) -> Dict:
    """Flip one notification to read; repeating the call changes nothing."""
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")
    notification.read = True
    db.flush()
    return notification_dto(notification)


def mark_all_read(db: Session, user_id: Optional[str]) -> int:
    """Mark every unread notification of a user as read; returns how many changed."""
    if not user_id:
        raise ValidationError("User ID required")
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    return updated
