# sociate/services/follows.py
"""Follow graph mutations."""

from typing import Dict, Optional

from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.db import insert_once
from sociate.errors import ValidationError
from sociate.logging_config import get_logger
from sociate.models import Follow, NotificationKind
from sociate.services.notifications import notify
from sociate.services.users import require_user

logger = get_logger(__name__)


def _find_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    return (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .first()
    )


def follow(db: Session, follower_id: Optional[str], following_id: Optional[str]) -> Dict:
    """
    Add the directed edge follower -> following.

    Following someone already followed succeeds without a second edge and
    without a second notification.

    Raises:
        ValidationError: if an id is missing or both ids are equal
        NotFoundError: if either user does not exist
    """
    if not follower_id or not following_id or follower_id == following_id:
        raise ValidationError("Invalid follow request")

    actor = require_user(db, follower_id)
    require_user(db, following_id)

    if _find_follow(db, follower_id, following_id):
        logger.debug("%s already follows %s", follower_id, following_id)
        return {"success": True, "message": "Already following"}

    edge = Follow(follower_id=follower_id, following_id=following_id, created_at=timeutil.now_ms())
    if not insert_once(db, edge):
        logger.debug("%s already follows %s (concurrent insert)", follower_id, following_id)
        return {"success": True, "message": "Already following"}

    notify(db, following_id, NotificationKind.follow, actor)
    logger.info("%s followed %s", follower_id, following_id)
    return {"success": True}


def unfollow(db: Session, follower_id: Optional[str], following_id: Optional[str]) -> Dict:
    """Remove the edge if present; a missing edge is not an error."""
    if not follower_id or not following_id:
        raise ValidationError("Invalid unfollow request")

    deleted = (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .delete(synchronize_session=False)
    )
    if deleted:
        logger.info("%s unfollowed %s", follower_id, following_id)
    return {"success": True}
