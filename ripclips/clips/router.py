# ripclips/clips/router.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ripclips.clips import service as svc
from ripclips.clips.schemas import (
    ClipCreate,
    ClipOut,
    ClipReject,
    CommentCreate,
    CommentOut,
)
from ripclips.core.errors import ClipError, to_http
from ripclips.core.security import (
    get_current_user_id,
    get_optional_user_id,
    is_moderator,
)
from ripclips.db.session import get_session

router = APIRouter(prefix="/api/clips", tags=["clips"])


# ======================= AUTH =======================


async def get_moderator_id(
    user_id: str = Depends(get_current_user_id),
) -> str:
    if not is_moderator(user_id):
        raise HTTPException(status_code=403, detail="moderators only")
    return user_id


# ======================= ENVÍO =======================


@router.post("/", response_model=ClipOut, status_code=201)
async def submit_clip_view(
    payload: ClipCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str | None = Depends(get_optional_user_id),
):
    """
    Se puede enviar sin login (queda como "Anonymous").
    El clip entra como pending hasta que un moderador lo revise.
    """
    if user_id and not payload.submitted_by:
        payload = payload.model_copy(update={"submitted_by": f"user-{user_id}"})
    try:
        clip = await svc.submit_clip(db, payload)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return svc.to_clip_out(clip)


# ======================= MODERACIÓN =======================


@router.get("/pending/", response_model=list[ClipOut])
async def pending_clips_view(
    db: AsyncSession = Depends(get_session),
    moderator_id: str = Depends(get_moderator_id),
):
    try:
        clips = await svc.list_pending(db)
    except ClipError as e:
        raise to_http(e)
    return [svc.to_clip_out(c) for c in clips]


@router.post("/{clip_id}/approve/", response_model=ClipOut)
async def approve_clip_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
    moderator_id: str = Depends(get_moderator_id),
):
    try:
        clip = await svc.approve_clip(db, clip_id, reviewer=moderator_id)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return svc.to_clip_out(clip)


@router.post("/{clip_id}/reject/", response_model=ClipOut)
async def reject_clip_view(
    clip_id: str,
    payload: ClipReject | None = None,
    db: AsyncSession = Depends(get_session),
    moderator_id: str = Depends(get_moderator_id),
):
    reason = payload.reason if payload else None
    try:
        clip = await svc.reject_clip(db, clip_id, reviewer=moderator_id, reason=reason)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return svc.to_clip_out(clip)


@router.delete("/{clip_id}/")
async def delete_clip_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
    moderator_id: str = Depends(get_moderator_id),
):
    try:
        await svc.delete_clip(db, clip_id)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return {"ok": True}


# ======================= COMENTARIOS =======================


@router.get("/{clip_id}/comments/", response_model=list[CommentOut])
async def list_comments_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
):
    try:
        comments = await svc.list_comments(db, clip_id)
    except ClipError as e:
        raise to_http(e)
    return [CommentOut.model_validate(c) for c in comments]


@router.post("/{clip_id}/comments/", response_model=CommentOut, status_code=201)
async def add_comment_view(
    clip_id: str,
    payload: CommentCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    try:
        comment = await svc.add_comment(
            db,
            clip_id,
            user_id=user_id,
            content=payload.content,
            user_display_name=payload.user_display_name,
        )
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return CommentOut.model_validate(comment)
