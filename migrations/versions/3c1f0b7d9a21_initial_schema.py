"""initial schema

Revision ID: 3c1f0b7d9a21
Revises:
Create Date: 2025-10-02 18:41:07.114902

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0b7d9a21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

media_type = sa.Enum('image', 'video', name='media_type')
notification_kind = sa.Enum('like', 'comment', 'follow', name='notification_kind')


def upgrade() -> None:
    """Upgrade schema."""
    # Conversation pairs are stored in codepoint order, whatever the database locale
    if op.get_context().dialect.name == 'postgresql':
        pair_order = 'user_a_id < user_b_id COLLATE "C"'
    else:
        pair_order = 'user_a_id < user_b_id'

    op.create_table(
        'users',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('nickname', sa.String(128), nullable=True),
        sa.Column('dob', sa.String(32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_picture', sa.Text(), nullable=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'posts',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('author_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_type', media_type, nullable=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    op.create_index('idx_posts_created', 'posts', [sa.text('created_at DESC')])
    # Feed: posts by a set of authors, newest first
    op.create_index('idx_posts_author_created', 'posts', ['author_id', 'created_at'])

    op.create_table(
        'likes',
        sa.Column('user_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('post_id', sa.String(128), sa.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('idx_likes_post', 'likes', ['post_id'])

    op.create_table(
        'comments',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('post_id', sa.String(128), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])
    op.create_index('idx_comments_post_created', 'comments', ['post_id', 'created_at'])

    op.create_table(
        'follows',
        sa.Column('follower_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('following_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follows_not_self'),
    )
    op.create_index('idx_follows_following', 'follows', ['following_id'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('user_a_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_b_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.UniqueConstraint('user_a_id', 'user_b_id', name='uq_conversations_pair'),
        sa.CheckConstraint(pair_order, name='ck_conversations_pair_order'),
    )
    op.create_index('ix_conversations_user_a_id', 'conversations', ['user_a_id'])
    op.create_index('ix_conversations_user_b_id', 'conversations', ['user_b_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('conversation_id', sa.String(128), sa.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_type', media_type, nullable=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.CheckConstraint('content IS NOT NULL OR media_url IS NOT NULL', name='ck_messages_has_body'),
    )
    # History paging: newest N before a cursor within one conversation
    op.create_index('idx_messages_conversation_created', 'messages', ['conversation_id', 'created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('user_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('kind', notification_kind, nullable=False),
        sa.Column('from_user_id', sa.String(128), nullable=False),
        sa.Column('from_username', sa.String(64), nullable=False),
        sa.Column('from_user_avatar', sa.Text(), nullable=True),
        sa.Column('post_id', sa.String(128), nullable=True),
        sa.Column('comment_id', sa.String(128), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications')
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('follows')
    op.drop_table('comments')
    op.drop_table('likes')
    op.drop_table('posts')
    op.drop_table('users')
    notification_kind.drop(op.get_bind(), checkfirst=True)
    media_type.drop(op.get_bind(), checkfirst=True)
