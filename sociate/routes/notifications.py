# sociate/routes/notifications.py
"""FastAPI routes for reading notifications and flipping their read flag."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from sociate.auth import asserted_user_id, check_actor
from sociate.db import get_session
from sociate.services import notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class MarkAllReadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")


@router.get("", response_model=List[Dict])
def list_notifications(
    user_id: Optional[str] = Query(None, alias="userId"),
    unread_only: bool = Query(False, alias="unreadOnly"),
) -> List[Dict]:
    with get_session() as db:
        return notifications.list_notifications(db, user_id, unread_only=unread_only)


@router.get("/unread-count", response_model=Dict)
def unread_count(user_id: Optional[str] = Query(None, alias="userId")) -> Dict:
    with get_session() as db:
        return {"count": notifications.unread_count(db, user_id)}


@router.post("/read-all", response_model=Dict)
def mark_all_read(body: MarkAllReadRequest, asserted: Optional[str] = Depends(asserted_user_id)) -> Dict:
    check_actor(asserted, body.user_id)
    with get_session() as db:
        updated = notifications.mark_all_read(db, body.user_id)
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read", response_model=Dict)
def mark_read(notification_id: str) -> Dict:
    with get_session() as db:
        return notifications.mark_read(db, notification_id)
