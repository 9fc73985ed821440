# sociate/routes/posts.py
"""FastAPI routes for posts, the feed, likes and comments."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, ConfigDict, Field

from sociate.auth import asserted_user_id, check_actor
from sociate.db import get_session
from sociate.routes.users import cacheable
from sociate.services import feed, posts

router = APIRouter(prefix="/api", tags=["posts"])


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    author_id: Optional[str] = Field(None, alias="authorId")
    caption: Optional[str] = None
    media_url: Optional[str] = Field(None, alias="mediaUrl", description="Reference to uploaded media")
    media_type: Optional[str] = Field(None, alias="mediaType", description="image or video")


class LikeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")


class CreateCommentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    author_id: Optional[str] = Field(None, alias="authorId")
    content: Optional[str] = None


@router.post("/posts", response_model=Dict)
def create_post(body: CreatePostRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    """Create a post and return it enriched, with empty likes and comments."""
    check_actor(asserted, body.author_id)
    with get_session() as db:
        return posts.create_post(
            db,
            author_id=body.author_id,
            caption=body.caption,
            media_url=body.media_url,
            media_type=body.media_type,
        )


@router.get("/feed", response_model=List[Dict])
@router.get("/posts", response_model=List[Dict], include_in_schema=False)
def get_feed(
    response: Response,
    user_id: Optional[str] = Query(None, alias="userId", description="Viewer; omit for the public timeline"),
) -> List[Dict]:
    """
    Up to 50 most recent posts by the viewer and everyone they follow.

    Without a viewer, the 50 most recent posts overall.
    """
    with get_session() as db:
        items = feed.get_feed(db, user_id)
    cacheable(response)
    return items


@router.post("/posts/{post_id}/like", response_model=Dict)
def like_post(post_id: str, body: LikeRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    check_actor(asserted, body.user_id)
    with get_session() as db:
        return posts.like_post(db, post_id, body.user_id)


@router.post("/posts/{post_id}/unlike", response_model=Dict)
def unlike_post(post_id: str, body: LikeRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    check_actor(asserted, body.user_id)
    with get_session() as db:
        return posts.unlike_post(db, post_id, body.user_id)


@router.get("/posts/{post_id}/comments", response_model=List[Dict])
def get_comments(post_id: str, response: Response) -> List[Dict]:
    """Comments oldest first, each with its author's username."""
    with get_session() as db:
        items = posts.get_comments(db, post_id)
    cacheable(response)
    return items


@router.post("/posts/{post_id}/comments", response_model=Dict)
def create_comment(
    post_id: str, body: CreateCommentRequest, asserted: Optional[str] = Depends(asserted_user_id)
) -> Dict:
    check_actor(asserted, body.author_id)
    with get_session() as db:
        return posts.create_comment(db, post_id, body.author_id, body.content)
