# ripclips/feed/engine.py
"""
Motor del feed: filtra, ordena y pagina los clips aprobados, y aplica los
likes / vistas contra el store.

Las funciones de ranking son puras (reciben la lista y devuelven otra);
FeedEngine solo agrega el acceso al store. No hay caché: cada llamada
relee el conjunto de clips.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, Sequence

from ripclips.clips.schemas import ClipCreate, ClipRecord, EPOCH
from ripclips.core.errors import NotFoundError, TransientStoreError, ValidationError

log = logging.getLogger("uvicorn")

GAME_FILTER_ALL = "all"

# pesos del hot score
LIKE_WEIGHT = 3
COMMENT_WEIGHT = 2
VIEW_WEIGHT = 0.1
DECAY_HOURS = 24
MIN_TIME_FACTOR = 0.1


class SortMode(str, Enum):
    NEWEST = "newest"
    MOST_LIKED = "most-liked"
    MOST_VIEWED = "most-viewed"
    HOT = "hot"


class ClipStore(Protocol):
    async def list_clips(self, status: str | None = None) -> list[ClipRecord]: ...
    async def get_clip(self, clip_id: str) -> ClipRecord | None: ...
    async def create_clip(self, data: ClipCreate) -> ClipRecord: ...
    async def set_status(
        self, clip_id: str, status: str, reviewer: str, reason: str | None = None
    ) -> ClipRecord: ...
    async def delete_clip(self, clip_id: str) -> None: ...
    async def adjust_like_count(self, clip_id: str, delta: int) -> int: ...
    async def create_like_record(self, clip_id: str, user_id: str) -> bool: ...
    async def delete_like_record(self, clip_id: str, user_id: str) -> bool: ...
    async def has_like_record(self, clip_id: str, user_id: str) -> bool: ...
    async def liked_clip_ids(self, user_id: str, clip_ids: list[str]) -> set[str]: ...
    async def increment_view_count(self, clip_id: str) -> bool: ...


@dataclass
class Page:
    items: list[ClipRecord]
    has_more: bool


@dataclass
class FeedView:
    items: list[ClipRecord]
    liked_ids: set[str] = field(default_factory=set)
    page: int = 0
    page_size: int = 0
    has_more: bool = False
    total: int = 0

    def user_has_liked(self, clip_id: str) -> bool:
        return clip_id in self.liked_ids


@dataclass
class LikeResult:
    clip_id: str
    likes: int
    liked: bool
    changed: bool


# ======================= PARÁMETROS =======================


def parse_game_filter(value: str | None) -> str:
    """Vacío → 'all'. Cualquier otro texto se usa como nombre de juego."""
    if value is None:
        return GAME_FILTER_ALL
    value = value.strip()
    if not value or value.casefold() == GAME_FILTER_ALL:
        return GAME_FILTER_ALL
    return value


def parse_sort_mode(value: str | SortMode | None) -> SortMode:
    """Vacío → newest. Un valor desconocido se rechaza."""
    if isinstance(value, SortMode):
        return value
    if value is None or not value.strip():
        return SortMode.NEWEST
    try:
        return SortMode(value.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in SortMode)
        raise ValidationError(f"invalid sort mode {value!r} (expected one of: {allowed})")


# ======================= RANKING =======================


def filter_clips(clips: Sequence[ClipRecord], game_filter: str) -> list[ClipRecord]:
    # match exacto sin mayúsculas: "last epoch" == "Last Epoch", pero no "Last Epoch 2"
    if game_filter.strip().casefold() == GAME_FILTER_ALL:
        return list(clips)
    wanted = game_filter.strip().casefold()
    return [c for c in clips if (c.game or "").strip().casefold() == wanted]


def _submitted(clip: ClipRecord) -> datetime:
    return clip.submitted_at or EPOCH


def hours_since_submission(clip: ClipRecord, now: datetime) -> float:
    hours = (now - _submitted(clip)).total_seconds() / 3600
    return max(0.0, hours)


def hot_score(clip: ClipRecord, now: datetime | None = None) -> float:
    now = now or datetime.now(timezone.utc)
    engagement = (
        clip.likes * LIKE_WEIGHT
        + clip.comments * COMMENT_WEIGHT
        + clip.views * VIEW_WEIGHT
    )
    hours = hours_since_submission(clip, now)
    time_factor = max(MIN_TIME_FACTOR, 1 / (1 + hours / DECAY_HOURS))
    return engagement * time_factor


def sort_clips(
    clips: Sequence[ClipRecord],
    mode: SortMode,
    now: datetime | None = None,
) -> list[ClipRecord]:
    """
    Orden descendente por la clave del modo, desempate por fecha (más nuevo
    primero) y al final por id ascendente. El orden no depende del orden en
    que llegan los clips: dos lecturas del store (una por página) dan la
    misma secuencia aunque la DB devuelva los empates mezclados.
    """
    mode = parse_sort_mode(mode)
    now = now or datetime.now(timezone.utc)

    if mode is SortMode.NEWEST:
        key = lambda c: _submitted(c)
    elif mode is SortMode.MOST_LIKED:
        key = lambda c: (c.likes, _submitted(c))
    elif mode is SortMode.MOST_VIEWED:
        key = lambda c: (c.views, _submitted(c))
    else:
        key = lambda c: (hot_score(c, now), _submitted(c))

    # sorted() es estable: primero por id, después por la clave del modo
    by_id = sorted(clips, key=lambda c: c.id)
    return sorted(by_id, key=key, reverse=True)


def paginate(clips: Sequence[ClipRecord], page_size: int, page_index: int) -> Page:
    if page_size < 1:
        raise ValidationError("page_size must be >= 1")
    if page_index < 0:
        raise ValidationError("page must be >= 0")
    start = page_index * page_size
    end = start + page_size
    return Page(items=list(clips[start:end]), has_more=end < len(clips))


# ======================= MOTOR =======================


class FeedEngine:
    def __init__(self, store: ClipStore, *, view_retries: int = 1):
        self.store = store
        self.view_retries = view_retries

    async def load(self) -> list[ClipRecord]:
        return await self.store.list_clips("approved")

    async def get_feed(
        self,
        game_filter: str | None = GAME_FILTER_ALL,
        sort_mode: str | SortMode | None = SortMode.NEWEST,
        page_index: int = 0,
        page_size: int = 12,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> FeedView:
        game = parse_game_filter(game_filter)
        mode = parse_sort_mode(sort_mode)

        clips = await self.load()
        ranked = sort_clips(filter_clips(clips, game), mode, now=now)
        page = paginate(ranked, page_size, page_index)

        liked: set[str] = set()
        if user_id and page.items:
            liked = await self.store.liked_clip_ids(user_id, [c.id for c in page.items])

        return FeedView(
            items=page.items,
            liked_ids=liked,
            page=page_index,
            page_size=page_size,
            has_more=page.has_more,
            total=len(ranked),
        )

    async def _require_clip(self, clip_id: str) -> ClipRecord:
        clip = await self.store.get_clip(clip_id)
        if clip is None:
            raise NotFoundError("clip not found")
        return clip

    async def like_clip(self, clip_id: str, user_id: str) -> LikeResult:
        clip = await self._require_clip(clip_id)

        # ya tiene like → no se crea otro registro ni se suma otra vez
        if await self.store.has_like_record(clip_id, user_id):
            return LikeResult(clip_id=clip_id, likes=clip.likes, liked=True, changed=False)

        # otro request ganó el insert entre el check y acá: mismo resultado que el like repetido
        if not await self.store.create_like_record(clip_id, user_id):
            current = await self._require_clip(clip_id)
            return LikeResult(clip_id=clip_id, likes=current.likes, liked=True, changed=False)

        likes = await self.store.adjust_like_count(clip_id, +1)
        return LikeResult(clip_id=clip_id, likes=likes, liked=True, changed=True)

    async def unlike_clip(self, clip_id: str, user_id: str) -> LikeResult:
        clip = await self._require_clip(clip_id)

        removed = await self.store.delete_like_record(clip_id, user_id)
        if not removed:
            return LikeResult(clip_id=clip_id, likes=clip.likes, liked=False, changed=False)

        likes = await self.store.adjust_like_count(clip_id, -1)
        return LikeResult(clip_id=clip_id, likes=likes, liked=False, changed=True)

    async def increment_views(self, clip_id: str) -> None:
        """
        Best-effort: si falla se reintenta `view_retries` veces y luego se
        loguea y se ignora. Nunca lanza.
        """
        attempts = 1 + max(0, self.view_retries)
        for attempt in range(1, attempts + 1):
            try:
                updated = await self.store.increment_view_count(clip_id)
                if not updated:
                    log.warning(f"⚠️ view ignorada: clip {clip_id} no existe")
                return
            except TransientStoreError as e:
                if attempt < attempts:
                    continue
                log.warning(f"⚠️ no se pudo contar la vista de {clip_id}: {e.detail}")
                return
            except Exception as e:
                log.warning(f"⚠️ no se pudo contar la vista de {clip_id}: {e!r}")
                return
