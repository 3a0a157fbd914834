# ripclips/clips/models.py
import uuid
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    Integer,
    String,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    func,
)
from sqlalchemy.types import UnicodeText
from ripclips.db.base import Base


CLIP_STATUSES = ("pending", "approved", "rejected")


def _new_clip_id() -> str:
    return uuid.uuid4().hex


class Clip(Base):
    __tablename__ = "clip_submissions"

    # id opaco (string), lo asigna el store al crear
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_clip_id)

    clip_url: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    game: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    streamer: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(UnicodeText, nullable=False, default="")
    submitted_by: Mapped[str] = mapped_column(String(120), nullable=False, default="Anonymous")

    # pending → approved | rejected (una sola vez)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", index=True
    )

    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    reviewed_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # contadores: solo se tocan con UPDATE atómicos (ver repository)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    streamer_profile_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    game_box_art_url: Mapped[str | None] = mapped_column(String(512), nullable=True)


class ClipLike(Base):
    """
    Quién le dio like a qué clip.
    Un usuario solo puede dar 1 like por clip.
    """
    __tablename__ = "clip_likes"
    __table_args__ = (
        UniqueConstraint("clip_id", "user_id", name="uq_cliplike_clip_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    clip_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("clip_submissions.id", ondelete="CASCADE"),
        index=True,
    )

    # el user id viene del proveedor de auth (sub del JWT)
    user_id: Mapped[str] = mapped_column(String(128), index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class ClipComment(Base):
    __tablename__ = "clip_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    clip_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("clip_submissions.id", ondelete="CASCADE"),
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    user_display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    content: Mapped[str] = mapped_column(UnicodeText, nullable=False)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
