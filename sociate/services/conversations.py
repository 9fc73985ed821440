# sociate/services/conversations.py
"""Direct messaging: conversation identity, inbox listing and message history."""

import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from sociate import timeutil
from sociate.config import MESSAGES_DEFAULT_LIMIT, MESSAGES_MAX_LIMIT
from sociate.db import insert_once
from sociate.errors import ForbiddenError, NotFoundError, ValidationError
from sociate.logging_config import get_logger
from sociate.models import Conversation, Message
from sociate.services.enrichment import (
    enrich_messages, message_dto, user_summary, users_by_id
)
from sociate.services.posts import parse_media_type
from sociate.services.users import require_user

logger = get_logger(__name__)


def canonical_pair(user_a_id: str, user_b_id: str) -> Tuple[str, str]:
    """Order two participant ids so the pair is independent of call order."""
    first, second = sorted((user_a_id, user_b_id))
    return first, second


def conversation_row(conversation: Conversation) -> Dict:
    return {
        "id": conversation.id,
        "userAId": conversation.user_a_id,
        "userBId": conversation.user_b_id,
        "createdAt": timeutil.to_iso(conversation.created_at),
    }


def _find_pair(db: Session, user1: str, user2: str) -> Optional[Conversation]:
    return (
        db.query(Conversation)
        .filter(Conversation.user_a_id == user1, Conversation.user_b_id == user2)
        .first()
    )


def get_or_create_conversation(db: Session, user_a_id: Optional[str], user_b_id: Optional[str]) -> Dict:
    """
    Return the single conversation between two users, creating it on first use.

    Raises:
        ValidationError: if an id is missing or both ids are equal
        NotFoundError: if either user does not exist
    """
    if not user_a_id or not user_b_id or user_a_id == user_b_id:
        raise ValidationError("Invalid conversation request")

    user1, user2 = canonical_pair(user_a_id, user_b_id)
    existing = _find_pair(db, user1, user2)
    if existing:
        return conversation_row(existing)

    require_user(db, user1)
    require_user(db, user2)

    conversation = Conversation(
        id=str(uuid.uuid4()), user_a_id=user1, user_b_id=user2, created_at=timeutil.now_ms()
    )
    if not insert_once(db, conversation):
        # Lost a race with the other participant; their row is the conversation.
        return conversation_row(_find_pair(db, user1, user2))

    logger.info("Created conversation %s between %s and %s", conversation.id, user1, user2)
    return conversation_row(conversation)


def list_conversations(db: Session, user_id: Optional[str]) -> List[Dict]:
    """
    Conversations a user takes part in, newest first.

    Each entry carries the other participant's summary and the latest
    message (id, content, createdAt), or None when nothing was sent yet.
    """
    if not user_id:
        raise ValidationError("User ID required")

    conversations = (
        db.query(Conversation)
        .filter(or_(Conversation.user_a_id == user_id, Conversation.user_b_id == user_id))
        .order_by(Conversation.created_at.desc(), Conversation.id.desc())
        .all()
    )
    if not conversations:
        return []

    def other_of(conv: Conversation) -> str:
        return conv.user_b_id if conv.user_a_id == user_id else conv.user_a_id

    others = users_by_id(db, (other_of(c) for c in conversations))

    latest = (
        db.query(Message.conversation_id, func.max(Message.created_at).label("latest_at"))
        .filter(Message.conversation_id.in_([c.id for c in conversations]))
        .group_by(Message.conversation_id)
        .subquery()
    )
    # Rows tied on the latest timestamp arrive in id order; the highest id wins.
    last_messages = {
        m.conversation_id: m
        for m in db.query(Message).join(
            latest,
            and_(
                Message.conversation_id == latest.c.conversation_id,
                Message.created_at == latest.c.latest_at,
            ),
        ).order_by(Message.created_at, Message.id).all()
    }

    result = []
    for conv in conversations:
        entry = conversation_row(conv)
        last = last_messages.get(conv.id)
        entry["otherUser"] = user_summary(others.get(other_of(conv)))
        entry["lastMessage"] = (
            {"id": last.id, "content": last.content, "createdAt": timeutil.to_iso(last.created_at)}
            if last else None
        )
        result.append(entry)
    return result


def require_conversation(db: Session, conversation_id: str) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        raise NotFoundError("Conversation not found")
    return conversation


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return MESSAGES_DEFAULT_LIMIT
    return max(1, min(int(limit), MESSAGES_MAX_LIMIT))


def get_messages(
    db: Session, conversation_id: str, limit: Optional[int] = None, before: Optional[str] = None
) -> List[Dict]:
    """
    Page through a conversation's history in reading order.

    Fetches the newest ``limit`` messages strictly older than ``before``
    (or the newest overall), then reverses them so the result runs
    oldest to newest.

    Args:
        db: Database session
        conversation_id: Conversation to read
        limit: Page size, clamped to [1, MESSAGES_MAX_LIMIT]
        before: ISO-8601 or epoch-ms cursor, exclusive

    Returns:
        Enriched messages, oldest first
    """
    require_conversation(db, conversation_id)
    page_size = clamp_limit(limit)

    query = db.query(Message).filter(Message.conversation_id == conversation_id)
    if before:
        query = query.filter(Message.created_at < timeutil.parse_iso_to_ms(before))

    newest_first = query.order_by(Message.created_at.desc(), Message.id.desc()).limit(page_size).all()
    return enrich_messages(db, list(reversed(newest_first)))


def send_message(
    db: Session,
    conversation_id: str,
    sender_id: Optional[str],
    content: Optional[str] = None,
    media_url: Optional[str] = None,
    media_type: Optional[str] = None,
) -> Dict:
    """
    Append a message to a conversation.

    Timestamps are strictly increasing within a conversation so that reading
    order and ``before`` cursors stay unambiguous for messages sent in the
    same millisecond. This is best-effort: the last timestamp is read without
    a lock, so two concurrent sends can still tie, and readers then order by id.

    Raises:
        ValidationError: if sender is missing or there is neither content nor media
        NotFoundError: if the conversation or sender does not exist
        ForbiddenError: if the sender is not a participant
    """
    if not sender_id or (not content and not media_url):
        raise ValidationError("Sender ID and content or media required")
    kind = parse_media_type(media_type)

    conversation = require_conversation(db, conversation_id)
    if sender_id not in (conversation.user_a_id, conversation.user_b_id):
        raise ForbiddenError("Sender is not a participant in this conversation")
    sender = require_user(db, sender_id)

    last_at = (
        db.query(func.max(Message.created_at))
        .filter(Message.conversation_id == conversation_id)
        .scalar()
    )
    created_at = timeutil.now_ms()
    if last_at is not None and created_at <= last_at:
        created_at = last_at + 1

    message = Message(
        id=str(uuid.uuid4()),
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content or None,
        media_url=media_url or None,
        media_type=kind,
        created_at=created_at,
    )
    db.add(message)
    db.flush()
    logger.info("User %s sent message %s in %s", sender_id, message.id, conversation_id)
    return message_dto(message, sender)
