"""clip submissions, likes and comments

Revision ID: 0001_clip_tables
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_clip_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "clip_submissions",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("clip_url", sa.String(512), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("game", sa.String(120), nullable=False),
        sa.Column("streamer", sa.String(120), nullable=False),
        sa.Column("description", sa.UnicodeText(), nullable=False),
        sa.Column("submitted_by", sa.String(120), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.Column("reviewed_by", sa.String(120), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("likes", sa.Integer(), server_default="0", nullable=False),
        sa.Column("views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("comments", sa.Integer(), server_default="0", nullable=False),
        sa.Column("streamer_profile_image_url", sa.String(512), nullable=True),
        sa.Column("game_box_art_url", sa.String(512), nullable=True),
    )
    op.create_index("ix_clip_submissions_game", "clip_submissions", ["game"])
    op.create_index("ix_clip_submissions_status", "clip_submissions", ["status"])
    op.create_index("ix_clip_submissions_submitted_at", "clip_submissions", ["submitted_at"])

    op.create_table(
        "clip_likes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "clip_id",
            sa.String(32),
            sa.ForeignKey("clip_submissions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("clip_id", "user_id", name="uq_cliplike_clip_user"),
    )
    op.create_index("ix_clip_likes_clip_id", "clip_likes", ["clip_id"])
    op.create_index("ix_clip_likes_user_id", "clip_likes", ["user_id"])

    op.create_table(
        "clip_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "clip_id",
            sa.String(32),
            sa.ForeignKey("clip_submissions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("user_display_name", sa.String(120), nullable=False),
        sa.Column("content", sa.UnicodeText(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_clip_comments_clip_id", "clip_comments", ["clip_id"])
    op.create_index("ix_clip_comments_user_id", "clip_comments", ["user_id"])
    op.create_index("ix_clip_comments_created_at", "clip_comments", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_clip_comments_created_at", table_name="clip_comments")
    op.drop_index("ix_clip_comments_user_id", table_name="clip_comments")
    op.drop_index("ix_clip_comments_clip_id", table_name="clip_comments")
    op.drop_table("clip_comments")
    op.drop_index("ix_clip_likes_user_id", table_name="clip_likes")
    op.drop_index("ix_clip_likes_clip_id", table_name="clip_likes")
    op.drop_table("clip_likes")
    op.drop_index("ix_clip_submissions_submitted_at", table_name="clip_submissions")
    op.drop_index("ix_clip_submissions_status", table_name="clip_submissions")
    op.drop_index("ix_clip_submissions_game", table_name="clip_submissions")
    op.drop_table("clip_submissions")
