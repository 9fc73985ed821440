# sociate/services/feed.py
"""
Feed assembly.

Visibility is public for every post, so the only policy is which authors a
viewer's feed draws from: the viewer plus everyone the viewer follows. An
anonymous request gets the global timeline.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from sociate.config import FEED_LIMIT
from sociate.models import Follow, Post
from sociate.services.enrichment import enrich_posts


def feed_author_ids(db: Session, viewer_id: str) -> List[str]:
    """Authors whose posts appear in ``viewer_id``'s feed."""
    followed = [
        row.following_id
        for row in db.query(Follow.following_id).filter(Follow.follower_id == viewer_id).all()
    ]
    return followed + [viewer_id]


def get_feed(db: Session, viewer_id: Optional[str] = None, limit: int = FEED_LIMIT) -> List[Dict]:
    """
    Most recent posts visible to a viewer, newest first.

    Args:
        db: Database session
        viewer_id: Viewing user; None for the public timeline
        limit: Maximum number of posts

    Returns:
        Enriched posts (likes, comments with authors, author summary)
    """
    query = db.query(Post)
    if viewer_id:
        author_ids = feed_author_ids(db, viewer_id)
        if not author_ids:
            return []
        query = query.filter(Post.author_id.in_(author_ids))

    posts = query.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit).all()
    return enrich_posts(db, posts)
