"""Initial unMute schema

Revision ID: 001
Revises: None
Create Date: 2024-09-01 00:00:00.000000+00:00

What:  Creates users, PublicPosts, PostLikes, comments, JournalEntries,
       MoodCheckIns and Resources.
How:   Foreign keys carry no ON DELETE rules; the services delete child
       rows explicitly before their parents.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def _flag_columns():
    return [
        sa.Column("is_flagged", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("flagged_at", sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("profile_picture", sa.String(255), nullable=True),
        _created_at(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "PublicPosts",
        sa.Column("post_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("topic", sa.String(100), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_flag_columns(),
        _created_at(),
    )
    op.create_index("idx_posts_created_at", "PublicPosts", [sa.text("created_at DESC")])
    op.create_index("idx_posts_flagged", "PublicPosts", ["is_flagged"])

    op.create_table(
        "PostLikes",
        sa.Column("like_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("PublicPosts.post_id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=False),
        _created_at(),
        sa.UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
    )

    op.create_table(
        "comments",
        sa.Column("comment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("PublicPosts.post_id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        *_flag_columns(),
        _created_at(),
    )
    op.create_index("idx_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "JournalEntries",
        sa.Column("entry_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index(
        "idx_journal_user_created", "JournalEntries", ["user_id", sa.text("created_at DESC")]
    )

    op.create_table(
        "MoodCheckIns",
        sa.Column("checkin_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column(
            "entry_id", sa.Integer(), sa.ForeignKey("JournalEntries.entry_id"), nullable=False
        ),
        sa.Column("mood", sa.String(32), nullable=False),
        _created_at(),
    )
    op.create_index("idx_mood_entry_id", "MoodCheckIns", ["entry_id"])

    op.create_table(
        "Resources",
        sa.Column("resource_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("url", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        _created_at(),
    )


def downgrade() -> None:
    op.drop_table("Resources")
    op.drop_index("idx_mood_entry_id", table_name="MoodCheckIns")
    op.drop_table("MoodCheckIns")
    op.drop_index("idx_journal_user_created", table_name="JournalEntries")
    op.drop_table("JournalEntries")
    op.drop_index("idx_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_table("PostLikes")
    op.drop_index("idx_posts_flagged", table_name="PublicPosts")
    op.drop_index("idx_posts_created_at", table_name="PublicPosts")
    op.drop_table("PublicPosts")
    op.drop_table("users")
