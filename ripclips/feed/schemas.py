# ripclips/feed/schemas.py
from pydantic import BaseModel

from ripclips.clips.schemas import ClipOut


class FeedClipOut(ClipOut):
    # ❤️ resuelto para el usuario que pide el feed (anónimo → False)
    user_has_liked: bool = False


class FeedPageOut(BaseModel):
    items: list[FeedClipOut]
    page: int
    page_size: int
    has_more: bool
    total: int


class LikeOut(BaseModel):
    clip_id: str
    likes: int
    liked: bool


class ViewOut(BaseModel):
    ok: bool = True
