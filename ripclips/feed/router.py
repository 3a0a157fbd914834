# ripclips/feed/router.py
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ripclips.core.config import settings
from ripclips.core.errors import ClipError, to_http
from ripclips.core.security import get_current_user_id, get_optional_user_id
from ripclips.db.session import get_session
from ripclips.feed.schemas import FeedPageOut, LikeOut, ViewOut
from ripclips.feed.service import engine_for, hydrate_feed_page

log = logging.getLogger("uvicorn")

router = APIRouter(prefix="/api/feed", tags=["feed"])


@router.get("/", response_model=FeedPageOut)
async def feed_list(
    game: str | None = Query(None, description="'all' o nombre exacto del juego"),
    sort: str | None = Query(None, description="newest | most-liked | most-viewed | hot"),
    page: int = Query(0, ge=0),
    page_size: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
    user_id: str | None = Depends(get_optional_user_id),
):
    size = min(page_size or settings.FEED_PAGE_SIZE, settings.FEED_MAX_PAGE_SIZE)
    try:
        view = await engine_for(db).get_feed(
            game_filter=game,
            sort_mode=sort,
            page_index=page,
            page_size=size,
            user_id=user_id,
        )
    except ClipError as e:
        raise to_http(e)
    return hydrate_feed_page(view)


@router.post("/{clip_id}/like/", response_model=LikeOut)
async def like_clip_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    try:
        result = await engine_for(db).like_clip(clip_id, user_id)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return LikeOut(clip_id=result.clip_id, likes=result.likes, liked=result.liked)


@router.delete("/{clip_id}/like/", response_model=LikeOut)
async def unlike_clip_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    try:
        result = await engine_for(db).unlike_clip(clip_id, user_id)
        await db.commit()
    except ClipError as e:
        await db.rollback()
        raise to_http(e)
    return LikeOut(clip_id=result.clip_id, likes=result.likes, liked=result.liked)


@router.post("/{clip_id}/view/", response_model=ViewOut)
async def add_view(
    clip_id: str,
    db: AsyncSession = Depends(get_session),
):
    """
    Contador de vistas best-effort: el front lo llama al montar el
    reproductor y nunca recibe un error por esto.
    """
    await engine_for(db).increment_views(clip_id)
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        log.warning(f"⚠️ commit de vista falló para {clip_id}: {e!r}")
    return ViewOut()
