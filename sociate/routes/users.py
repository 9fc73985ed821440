# sociate/routes/users.py
"""FastAPI routes for user sync, profiles, search and the follow graph."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, ConfigDict, Field

from sociate.auth import asserted_user_id, check_actor
from sociate.config import READ_CACHE_MAX_AGE
from sociate.db import get_session
from sociate.services import follows, posts, users

router = APIRouter(prefix="/api", tags=["users"])


class SyncUserRequest(BaseModel):
    """Profile pushed by the client after the identity provider signs a user in."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Stable id issued by the identity source")
    username: Optional[str] = Field(None, description="Unique handle")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    nickname: Optional[str] = None
    dob: Optional[str] = Field(None, description="Date of birth (YYYY-MM-DD)")
    address: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = Field(None, alias="profilePicture")


class FollowRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    follower_id: Optional[str] = Field(None, alias="followerId")
    following_id: Optional[str] = Field(None, alias="followingId")


def cacheable(response: Response) -> None:
    response.headers["Cache-Control"] = f"max-age={READ_CACHE_MAX_AGE}"


@router.post("/users/sync", response_model=Dict)
def sync_user(body: SyncUserRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    """Create the user on first sign-in, update the profile on later syncs."""
    check_actor(asserted, body.id)
    with get_session() as db:
        return users.sync_user(
            db,
            user_id=body.id,
            username=body.username,
            name=body.name,
            email=body.email,
            nickname=body.nickname,
            dob=body.dob,
            address=body.address,
            bio=body.bio,
            profile_picture=body.profile_picture,
        )


@router.get("/users/search", response_model=List[Dict])
def search_users(q: Optional[str] = Query(None, description="Substring to look for")) -> List[Dict]:
    """
    Case-insensitive substring search across username, name and nickname.

    Returns at most 20 users, first matches in store order (no ranking).
    """
    with get_session() as db:
        return users.search_users(db, q)


@router.get("/users/by-username/{username}", response_model=Dict)
def get_user_by_username(username: str, response: Response) -> Dict:
    with get_session() as db:
        profile = users.get_user_profile_by_username(db, username)
    cacheable(response)
    return profile


@router.get("/users/{user_id}", response_model=Dict)
def get_user(user_id: str, response: Response) -> Dict:
    """
    User row plus followersCount, followingCount and postsCount.

    Counts are computed per request; the response may be cached briefly.
    """
    with get_session() as db:
        profile = users.get_user_profile(db, user_id)
    cacheable(response)
    return profile


@router.get("/users/{user_id}/followers", response_model=List[Dict])
def get_followers(user_id: str) -> List[Dict]:
    with get_session() as db:
        return users.get_followers(db, user_id)


@router.get("/users/{user_id}/following", response_model=List[Dict])
def get_following(user_id: str) -> List[Dict]:
    with get_session() as db:
        return users.get_following(db, user_id)


@router.get("/users/{user_id}/posts", response_model=List[Dict])
def get_user_posts(user_id: str) -> List[Dict]:
    """A user's posts newest first, with likes, comments and author inlined."""
    with get_session() as db:
        return posts.get_user_posts(db, user_id)


@router.post("/follow", response_model=Dict)
def follow(body: FollowRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    check_actor(asserted, body.follower_id)
    with get_session() as db:
        return follows.follow(db, body.follower_id, body.following_id)


@router.post("/unfollow", response_model=Dict)
def unfollow(body: FollowRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    check_actor(asserted, body.follower_id)
    with get_session() as db:
        return follows.unfollow(db, body.follower_id, body.following_id)
