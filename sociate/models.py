from enum import Enum as PyEnum

from sqlalchemy import (
    BigInteger, Boolean, CheckConstraint, Column, Enum, ForeignKey, Index, String, Text, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Ids are opaque strings: users come from the identity provider, everything else is a uuid4.
ID = String(128)


class MediaType(str, PyEnum):
    image = "image"
    video = "video"


class NotificationKind(str, PyEnum):
    like = "like"
    comment = "comment"
    follow = "follow"


MEDIA_TYPE = Enum(MediaType, name="media_type")


class User(Base):
    __tablename__ = "users"
    id = Column(ID, primary_key=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(128), nullable=False)
    email = Column(String(255), nullable=False)
    nickname = Column(String(128), nullable=True)
    dob = Column(String(32), nullable=True)
    address = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    profile_picture = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)

    posts = relationship("Post", back_populates="author")


class Post(Base):
    __tablename__ = "posts"
    id = Column(ID, primary_key=True)
    author_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    caption = Column(Text, nullable=True)
    media_url = Column(Text, nullable=True)
    media_type = Column(MEDIA_TYPE, nullable=True)
    created_at = Column(BigInteger, nullable=False)

    author = relationship("User", back_populates="posts")


Index("idx_posts_created", Post.created_at.desc())
Index("idx_posts_author_created", Post.author_id, Post.created_at)


class Like(Base):
    __tablename__ = "likes"
    user_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(ID, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(BigInteger, nullable=False)


Index("idx_likes_post", Like.post_id)


class Comment(Base):
    __tablename__ = "comments"
    id = Column(ID, primary_key=True)
    post_id = Column(ID, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(BigInteger, nullable=False)


Index("idx_comments_post_created", Comment.post_id, Comment.created_at)


class Follow(Base):
    __tablename__ = "follows"
    follower_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    following_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    )


Index("idx_follows_following", Follow.following_id)


class Conversation(Base):
    __tablename__ = "conversations"
    id = Column(ID, primary_key=True)
    user_a_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False)

    # Pair order is codepoint order, matching sorted() in Python; Postgres
    # would otherwise compare under the database locale.
    __table_args__ = (
        UniqueConstraint("user_a_id", "user_b_id", name="uq_conversations_pair"),
        CheckConstraint(
            'user_a_id < user_b_id COLLATE "C"', name="ck_conversations_pair_order"
        ).ddl_if(dialect="postgresql"),
        CheckConstraint(
            "user_a_id < user_b_id", name="ck_conversations_pair_order"
        ).ddl_if(callable_=lambda ddl, target, bind, **kw: kw["dialect"].name != "postgresql"),
    )


class Message(Base):
    __tablename__ = "messages"
    id = Column(ID, primary_key=True)
    conversation_id = Column(ID, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=True)
    media_url = Column(Text, nullable=True)
    media_type = Column(MEDIA_TYPE, nullable=True)
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        CheckConstraint("content IS NOT NULL OR media_url IS NOT NULL", name="ck_messages_has_body"),
    )


Index("idx_messages_conversation_created", Message.conversation_id, Message.created_at)


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(ID, primary_key=True)
    user_id = Column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind = Column(Enum(NotificationKind, name="notification_kind"), nullable=False)
    from_user_id = Column(ID, nullable=False)
    from_username = Column(String(64), nullable=False)
    from_user_avatar = Column(Text, nullable=True)
    post_id = Column(ID, nullable=True)
    comment_id = Column(ID, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(BigInteger, nullable=False)


Index("idx_notifications_user_created", Notification.user_id, Notification.created_at)
