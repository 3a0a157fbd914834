import pytest
from sqlalchemy import func, select, text

from ripclips.clips.models import ClipLike
from ripclips.clips.repository import ClipRepository, _store_call
from ripclips.clips.schemas import ClipCreate
from ripclips.core.errors import (
    NotFoundError,
    StatusTransitionError,
    TransientStoreError,
    ValidationError,
)
from ripclips.feed.engine import FeedEngine

from helpers import hours_ago


def _payload(**overrides) -> ClipCreate:
    data = {
        "clip_url": "https://clips.twitch.tv/BraveDeathClip-abc123",
        "title": "Boss one-shot",
        "game": "Last Epoch",
        "streamer": "streamer1",
    }
    data.update(overrides)
    return ClipCreate(**data)


async def _like_rows(db, clip_id: str) -> int:
    res = await db.execute(select(func.count(ClipLike.id)).where(ClipLike.clip_id == clip_id))
    return int(res.scalar_one())


class TestClips:
    async def test_create_starts_pending_with_zero_counters(self, db):
        repo = ClipRepository(db)
        clip = await repo.create_clip(_payload())
        await db.commit()

        assert clip.status == "pending"
        assert (clip.likes, clip.views, clip.comments) == (0, 0, 0)
        assert clip.submitted_by == "Anonymous"
        assert len(clip.id) == 32

        stored = await repo.get_clip(clip.id)
        assert stored is not None
        assert stored.submitted_at.tzinfo is not None

    async def test_list_by_status_newest_first(self, db, add_clip):
        await add_clip("old", submitted_at=hours_ago(5))
        await add_clip("new", submitted_at=hours_ago(1))
        await add_clip("queued", status="pending")

        repo = ClipRepository(db)
        approved = await repo.list_clips("approved")
        assert [c.id for c in approved] == ["new", "old"]
        pending = await repo.list_clips("pending")
        assert [c.id for c in pending] == ["queued"]

    async def test_list_ties_ordered_by_id(self, db, add_clip):
        ts = hours_ago(3)
        for clip_id in ("m", "z", "a"):
            await add_clip(clip_id, submitted_at=ts)
        await add_clip("fresh", submitted_at=hours_ago(1))

        clips = await ClipRepository(db).list_clips("approved")
        assert [c.id for c in clips] == ["fresh", "a", "m", "z"]

    async def test_approve_once(self, db, add_clip):
        await add_clip("c1", status="pending")
        repo = ClipRepository(db)

        clip = await repo.set_status("c1", "approved", "mod-1")
        assert clip.status == "approved"
        assert clip.reviewed_by == "mod-1"
        assert clip.reviewed_at is not None
        assert clip.rejection_reason is None

        with pytest.raises(StatusTransitionError):
            await repo.set_status("c1", "rejected", "mod-2", "late")

    async def test_reject_keeps_reason(self, db, add_clip):
        await add_clip("c1", status="pending")
        clip = await ClipRepository(db).set_status("c1", "rejected", "mod-1", "blurry")
        assert clip.status == "rejected"
        assert clip.rejection_reason == "blurry"

    async def test_clip_vanishing_after_review_is_not_found(self, db, add_clip):
        await add_clip("c1", status="pending")

        class VanishingRepository(ClipRepository):
            # otro request borró el clip justo después del UPDATE
            async def get_clip(self, clip_id):
                return None

        with pytest.raises(NotFoundError):
            await VanishingRepository(db).set_status("c1", "approved", "mod-1")

    async def test_status_errors(self, db, add_clip):
        repo = ClipRepository(db)
        with pytest.raises(NotFoundError):
            await repo.set_status("missing", "approved", "mod-1")
        await add_clip("c1", status="pending")
        with pytest.raises(ValidationError):
            await repo.set_status("c1", "pending", "mod-1")

    async def test_delete_removes_likes_and_comments(self, db, add_clip):
        await add_clip("c1")
        repo = ClipRepository(db)
        await repo.create_like_record("c1", "u1")
        await repo.create_comment("c1", user_id="u1", user_display_name="U", content="rip")
        await db.commit()

        await repo.delete_clip("c1")
        await db.commit()

        assert await repo.get_clip("c1") is None
        assert await _like_rows(db, "c1") == 0
        assert await repo.list_comments("c1") == []

        with pytest.raises(NotFoundError):
            await repo.delete_clip("c1")


class TestCounters:
    async def test_like_count_never_negative(self, db, add_clip):
        await add_clip("c1", likes=1)
        repo = ClipRepository(db)
        assert await repo.adjust_like_count("c1", -1) == 0
        assert await repo.adjust_like_count("c1", -1) == 0
        assert await repo.adjust_like_count("c1", +2) == 2

    async def test_adjust_unknown_clip(self, db):
        with pytest.raises(NotFoundError):
            await ClipRepository(db).adjust_like_count("missing", 1)

    async def test_increment_views(self, db, add_clip):
        await add_clip("c1", views=41)
        repo = ClipRepository(db)
        assert await repo.increment_view_count("c1") is True
        assert await repo.increment_view_count("missing") is False
        await db.commit()
        assert (await repo.get_clip("c1")).views == 42

    async def test_comment_bumps_counter(self, db, add_clip):
        await add_clip("c1")
        repo = ClipRepository(db)
        await repo.create_comment("c1", user_id="u1", user_display_name="A", content="first")
        await repo.create_comment("c1", user_id="u2", user_display_name="B", content="second")
        await db.commit()

        assert (await repo.get_clip("c1")).comments == 2
        comments = await repo.list_comments("c1")
        assert [c.content for c in comments] == ["second", "first"]

        with pytest.raises(NotFoundError):
            await repo.create_comment("missing", user_id="u1", user_display_name="A", content="x")


class TestLikesThroughEngine:
    async def test_like_unlike_roundtrip(self, db, add_clip):
        await add_clip("c1", likes=10)
        repo = ClipRepository(db)
        engine = FeedEngine(repo)

        result = await engine.like_clip("c1", "u1")
        await db.commit()
        assert result.likes == 11
        assert await repo.has_like_record("c1", "u1")

        again = await engine.like_clip("c1", "u1")
        await db.commit()
        assert again.changed is False
        assert (await repo.get_clip("c1")).likes == 11
        assert await _like_rows(db, "c1") == 1

        result = await engine.unlike_clip("c1", "u1")
        await db.commit()
        assert result.likes == 10
        assert not await repo.has_like_record("c1", "u1")
        assert await _like_rows(db, "c1") == 0

    async def test_liked_clip_ids(self, db, add_clip):
        await add_clip("c1")
        await add_clip("c2")
        repo = ClipRepository(db)
        await repo.create_like_record("c1", "u1")
        await repo.create_like_record("c2", "u2")
        await db.commit()

        assert await repo.liked_clip_ids("u1", ["c1", "c2"]) == {"c1"}
        assert await repo.liked_clip_ids("u1", []) == set()

    async def test_duplicate_insert_reports_not_created(self, session_factory, add_clip):
        await add_clip("c1")
        async with session_factory() as first:
            assert await ClipRepository(first).create_like_record("c1", "u1") is True
            await first.commit()

        async with session_factory() as second:
            repo = ClipRepository(second)
            assert await repo.create_like_record("c1", "u1") is False
            # la transacción sigue usable después del choque con el UNIQUE
            assert await repo.increment_view_count("c1") is True
            await second.commit()
            assert await _like_rows(second, "c1") == 1

    async def test_like_race_lost_after_check_is_idempotent(self, session_factory, add_clip):
        await add_clip("c1")
        async with session_factory() as first:
            await FeedEngine(ClipRepository(first)).like_clip("c1", "u1")
            await first.commit()

        class LateCheckRepository(ClipRepository):
            # el check corrió antes de que el otro insert fuera visible
            async def has_like_record(self, clip_id, user_id):
                return False

        async with session_factory() as second:
            result = await FeedEngine(LateCheckRepository(second)).like_clip("c1", "u1")
            await second.commit()

            assert result.liked is True
            assert result.changed is False
            assert result.likes == 1
            assert (await ClipRepository(second).get_clip("c1")).likes == 1
            assert await _like_rows(second, "c1") == 1


class TestTransientErrors:
    async def test_transient_error_rolls_back_the_session(self, db, add_clip):
        await add_clip("c1", views=1)
        repo = ClipRepository(db)
        await repo.increment_view_count("c1")

        with pytest.raises(TransientStoreError):
            async with _store_call(db, "broken"):
                await db.execute(text("UPDATE no_such_table SET x = 1"))

        assert not db.in_transaction()
        assert (await repo.get_clip("c1")).views == 1

    async def test_view_retry_runs_on_a_clean_session(self, db, add_clip):
        await add_clip("c1", views=1)

        class FlakyRepository(ClipRepository):
            failures = 1

            async def increment_view_count(self, clip_id):
                if self.failures:
                    self.failures -= 1
                    async with _store_call(self.db, "increment_view_count"):
                        await self.db.execute(text("UPDATE no_such_table SET x = 1"))
                return await super().increment_view_count(clip_id)

        await FeedEngine(FlakyRepository(db), view_retries=1).increment_views("c1")
        await db.commit()
        assert (await ClipRepository(db).get_clip("c1")).views == 2
