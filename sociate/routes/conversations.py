# sociate/routes/conversations.py
"""FastAPI routes for direct messaging."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from sociate.auth import asserted_user_id, check_actor
from sociate.db import get_session
from sociate.services import conversations

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


class CreateConversationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_a_id: Optional[str] = Field(None, alias="userAId")
    user_b_id: Optional[str] = Field(None, alias="userBId")


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: Optional[str] = Field(None, alias="senderId")
    content: Optional[str] = None
    media_url: Optional[str] = Field(None, alias="mediaUrl")
    media_type: Optional[str] = Field(None, alias="mediaType")


@router.post("", response_model=Dict)
def create_conversation(
    body: CreateConversationRequest, asserted: Optional[str] = Depends(asserted_user_id)
) -> Dict:
    """Get or create the one conversation between two users, in either argument order."""
    if asserted is not None and asserted != body.user_b_id:
        check_actor(asserted, body.user_a_id)
    with get_session() as db:
        return conversations.get_or_create_conversation(db, body.user_a_id, body.user_b_id)


@router.get("", response_model=List[Dict])
def list_conversations(user_id: Optional[str] = Query(None, alias="userId")) -> List[Dict]:
    """Inbox: conversations newest first with the other participant and the last message."""
    with get_session() as db:
        return conversations.list_conversations(db, user_id)


@router.get("/{conversation_id}/messages", response_model=List[Dict])
def get_messages(
    conversation_id: str,
    limit: Optional[int] = Query(None, description="Page size (default 50)"),
    before: Optional[str] = Query(None, description="Only messages strictly older than this timestamp"),
) -> List[Dict]:
    """Up to ``limit`` messages before the cursor, oldest to newest."""
    with get_session() as db:
        return conversations.get_messages(db, conversation_id, limit=limit, before=before)


@router.post("/{conversation_id}/messages", response_model=Dict)
def send_message(
    conversation_id: str, body: SendMessageRequest, asserted: Optional[str] = Depends(asserted_user_id)
) -> Dict:
    check_actor(asserted, body.sender_id)
    with get_session() as db:
        return conversations.send_message(
            db,
            conversation_id,
            sender_id=body.sender_id,
            content=body.content,
            media_url=body.media_url,
            media_type=body.media_type,
        )
