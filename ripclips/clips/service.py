# ripclips/clips/service.py
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ripclips.clips.models import ClipComment
from ripclips.clips.repository import ClipRepository
from ripclips.clips.schemas import ClipCreate, ClipOut, ClipRecord
from ripclips.clips.urls import to_embed_url
from ripclips.core.config import settings
from ripclips.core.errors import NotFoundError

log = logging.getLogger("uvicorn")

DEFAULT_REJECTION_REASON = "Quality standards not met"


def to_clip_out(clip: ClipRecord) -> ClipOut:
    return ClipOut(
        **clip.model_dump(),
        embed_url=to_embed_url(clip.clip_url, settings.embed_parents_list),
    )


async def submit_clip(db: AsyncSession, data: ClipCreate) -> ClipRecord:
    # El commit lo hace el router
    clip = await ClipRepository(db).create_clip(data)
    log.info(f"📥 clip enviado {clip.id} ({clip.game}) por {clip.submitted_by}")
    return clip


async def list_pending(db: AsyncSession) -> list[ClipRecord]:
    return await ClipRepository(db).list_clips("pending")


async def approve_clip(db: AsyncSession, clip_id: str, reviewer: str) -> ClipRecord:
    clip = await ClipRepository(db).set_status(clip_id, "approved", reviewer)
    log.info(f"✅ clip {clip_id} aprobado por {reviewer}")
    return clip


async def reject_clip(
    db: AsyncSession,
    clip_id: str,
    reviewer: str,
    reason: str | None = None,
) -> ClipRecord:
    reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
    clip = await ClipRepository(db).set_status(clip_id, "rejected", reviewer, reason)
    log.info(f"🚫 clip {clip_id} rechazado por {reviewer}: {reason}")
    return clip


async def delete_clip(db: AsyncSession, clip_id: str) -> None:
    await ClipRepository(db).delete_clip(clip_id)
    log.info(f"🗑️ clip {clip_id} eliminado")


async def add_comment(
    db: AsyncSession,
    clip_id: str,
    *,
    user_id: str,
    content: str,
    user_display_name: str | None = None,
) -> ClipComment:
    name = (user_display_name or "").strip() or f"user-{user_id}"
    return await ClipRepository(db).create_comment(
        clip_id,
        user_id=user_id,
        user_display_name=name,
        content=content,
    )


async def list_comments(db: AsyncSession, clip_id: str) -> list[ClipComment]:
    repo = ClipRepository(db)
    if await repo.get_clip(clip_id) is None:
        raise NotFoundError("clip not found")
    return await repo.list_comments(clip_id)
