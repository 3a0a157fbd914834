# ripclips/clips/repository.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import select, update, delete, desc, case, asc
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ripclips.clips.models import Clip, ClipLike, ClipComment
from ripclips.clips.schemas import ClipCreate, ClipRecord
from ripclips.core.errors import (
    NotFoundError,
    StatusTransitionError,
    TransientStoreError,
    ValidationError,
)

log = logging.getLogger("uvicorn")

REVIEW_STATUSES = ("approved", "rejected")


@asynccontextmanager
async def _store_call(db: AsyncSession, what: str):
    """
    Traduce fallos de red/DB a TransientStoreError.
    Los errores de integridad y de lógica pasan tal cual.

    En un fallo transitorio se hace rollback antes de relanzar, así la
    sesión queda lista para reintentar.
    """
    try:
        yield
    except (OperationalError, InterfaceError, TimeoutError, OSError) as e:
        await db.rollback()
        raise TransientStoreError(f"{what}: store unavailable") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            await db.rollback()
            raise TransientStoreError(f"{what}: connection lost") from e
        raise


class ClipRepository:
    """
    Store SQL de clips, likes y comentarios.

    Ningún método hace commit: el router decide cuándo confirmar, así el
    registro de like y su contador viajan en la misma transacción.
    Los contadores se tocan SOLO con UPDATE col = col + delta.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------ CLIPS ------------------

    async def list_clips(self, status: str | None = None) -> list[ClipRecord]:
        q = select(Clip).order_by(desc(Clip.submitted_at), asc(Clip.id))
        if status is not None:
            q = q.where(Clip.status == status)
        async with _store_call(self.db, "list_clips"):
            res = await self.db.execute(q.execution_options(populate_existing=True))
        return [ClipRecord.model_validate(c) for c in res.scalars()]

    async def get_clip(self, clip_id: str) -> ClipRecord | None:
        q = select(Clip).where(Clip.id == clip_id).execution_options(populate_existing=True)
        async with _store_call(self.db, "get_clip"):
            res = await self.db.execute(q)
        clip = res.scalar_one_or_none()
        return ClipRecord.model_validate(clip) if clip else None

    async def create_clip(self, data: ClipCreate) -> ClipRecord:
        clip = Clip(
            clip_url=data.clip_url,
            title=data.title,
            game=data.game,
            streamer=data.streamer,
            description=data.description or "",
            submitted_by=(data.submitted_by or "").strip() or "Anonymous",
            status="pending",
            submitted_at=datetime.now(timezone.utc),
            likes=0,
            views=0,
            comments=0,
            streamer_profile_image_url=data.streamer_profile_image_url,
            game_box_art_url=data.game_box_art_url,
        )
        self.db.add(clip)
        async with _store_call(self.db, "create_clip"):
            await self.db.flush()
        return ClipRecord.model_validate(clip)

    async def set_status(
        self,
        clip_id: str,
        status: str,
        reviewer: str,
        reason: str | None = None,
    ) -> ClipRecord:
        """
        pending → approved | rejected, una sola vez.
        El WHERE status='pending' hace que dos moderadores a la vez no puedan
        pisarse: el segundo ve rowcount=0.
        """
        if status not in REVIEW_STATUSES:
            raise ValidationError(f"invalid status: {status!r}")

        stmt = (
            update(Clip)
            .where(Clip.id == clip_id, Clip.status == "pending")
            .values(
                status=status,
                reviewed_by=reviewer,
                reviewed_at=datetime.now(timezone.utc),
                rejection_reason=reason if status == "rejected" else None,
            )
            .execution_options(synchronize_session=False)
        )
        async with _store_call(self.db, "set_status"):
            res = await self.db.execute(stmt)

        if res.rowcount == 0:
            current = await self.get_clip(clip_id)
            if current is None:
                raise NotFoundError("clip not found")
            raise StatusTransitionError(f"clip already {current.status}")

        clip = await self.get_clip(clip_id)
        if clip is None:
            raise NotFoundError("clip not found")
        return clip

    async def delete_clip(self, clip_id: str) -> None:
        # borramos hijos a mano: no todos los motores aplican ON DELETE CASCADE
        async with _store_call(self.db, "delete_clip"):
            await self.db.execute(
                delete(ClipLike)
                .where(ClipLike.clip_id == clip_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(ClipComment)
                .where(ClipComment.clip_id == clip_id)
                .execution_options(synchronize_session=False)
            )
            res = await self.db.execute(
                delete(Clip)
                .where(Clip.id == clip_id)
                .execution_options(synchronize_session=False)
            )
        if res.rowcount == 0:
            raise NotFoundError("clip not found")

    # ------------------ CONTADORES ------------------

    async def adjust_like_count(self, clip_id: str, delta: int) -> int:
        """Suma delta a likes (nunca por debajo de 0). Devuelve el valor nuevo."""
        new_value = Clip.likes + delta
        stmt = (
            update(Clip)
            .where(Clip.id == clip_id)
            .values(likes=case((new_value < 0, 0), else_=new_value))
            .execution_options(synchronize_session=False)
        )
        async with _store_call(self.db, "adjust_like_count"):
            res = await self.db.execute(stmt)
            if res.rowcount == 0:
                raise NotFoundError("clip not found")
            count = await self.db.execute(select(Clip.likes).where(Clip.id == clip_id))
        return int(count.scalar_one() or 0)

    async def increment_view_count(self, clip_id: str) -> bool:
        stmt = (
            update(Clip)
            .where(Clip.id == clip_id)
            .values(views=Clip.views + 1)
            .execution_options(synchronize_session=False)
        )
        async with _store_call(self.db, "increment_view_count"):
            res = await self.db.execute(stmt)
        return res.rowcount > 0

    # ------------------ LIKES ------------------

    async def has_like_record(self, clip_id: str, user_id: str) -> bool:
        q = select(ClipLike.id).where(
            ClipLike.clip_id == clip_id,
            ClipLike.user_id == user_id,
        ).limit(1)
        async with _store_call(self.db, "has_like_record"):
            res = await self.db.execute(q)
        return res.first() is not None

    async def create_like_record(self, clip_id: str, user_id: str) -> bool:
        """
        Inserta el like dentro de un SAVEPOINT. Si otro request ya lo insertó
        (doble click concurrente) choca con el UNIQUE y devuelve False; la
        transacción de afuera sigue viva.
        """
        try:
            async with _store_call(self.db, "create_like_record"):
                async with self.db.begin_nested():
                    self.db.add(ClipLike(clip_id=clip_id, user_id=user_id))
        except IntegrityError:
            log.info(f"ℹ️ like duplicado de {user_id} en {clip_id}, ya existía")
            return False
        return True

    async def delete_like_record(self, clip_id: str, user_id: str) -> bool:
        stmt = (
            delete(ClipLike)
            .where(ClipLike.clip_id == clip_id, ClipLike.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        async with _store_call(self.db, "delete_like_record"):
            res = await self.db.execute(stmt)
        return res.rowcount > 0

    async def liked_clip_ids(self, user_id: str, clip_ids: list[str]) -> set[str]:
        if not clip_ids:
            return set()
        q = select(ClipLike.clip_id).where(
            ClipLike.user_id == user_id,
            ClipLike.clip_id.in_(clip_ids),
        )
        async with _store_call(self.db, "liked_clip_ids"):
            res = await self.db.execute(q)
        return {row[0] for row in res.all()}

    # ------------------ COMENTARIOS ------------------

    async def create_comment(
        self,
        clip_id: str,
        *,
        user_id: str,
        user_display_name: str,
        content: str,
    ) -> ClipComment:
        # primero el contador: si el clip no existe no llegamos a insertar
        stmt = (
            update(Clip)
            .where(Clip.id == clip_id)
            .values(comments=Clip.comments + 1)
            .execution_options(synchronize_session=False)
        )
        async with _store_call(self.db, "create_comment"):
            res = await self.db.execute(stmt)
        if res.rowcount == 0:
            raise NotFoundError("clip not found")

        comment = ClipComment(
            clip_id=clip_id,
            user_id=user_id,
            user_display_name=user_display_name,
            content=content,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(comment)
        async with _store_call(self.db, "create_comment"):
            await self.db.flush()
        return comment

    async def list_comments(self, clip_id: str) -> list[ClipComment]:
        q = (
            select(ClipComment)
            .where(ClipComment.clip_id == clip_id)
            .order_by(desc(ClipComment.created_at), desc(ClipComment.id))
        )
        async with _store_call(self.db, "list_comments"):
            res = await self.db.execute(q)
        return list(res.scalars())
