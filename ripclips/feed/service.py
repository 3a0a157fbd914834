# ripclips/feed/service.py
from sqlalchemy.ext.asyncio import AsyncSession

from ripclips.clips.repository import ClipRepository
from ripclips.clips.service import to_clip_out
from ripclips.core.config import settings
from ripclips.feed.engine import FeedEngine, FeedView
from ripclips.feed.schemas import FeedClipOut, FeedPageOut


def engine_for(db: AsyncSession) -> FeedEngine:
    return FeedEngine(ClipRepository(db), view_retries=settings.VIEW_RETRIES)


def hydrate_feed_page(view: FeedView) -> FeedPageOut:
    """Convierte el FeedView del motor en lo que espera el front."""
    items = [
        FeedClipOut(
            **to_clip_out(clip).model_dump(),
            user_has_liked=view.user_has_liked(clip.id),
        )
        for clip in view.items
    ]
    return FeedPageOut(
        items=items,
        page=view.page,
        page_size=view.page_size,
        has_more=view.has_more,
        total=view.total,
    )
