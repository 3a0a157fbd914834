from datetime import datetime, timedelta, timezone

from ripclips.clips.schemas import ClipRecord
from ripclips.core.security import create_access_token


def hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


def make_record(clip_id: str, **overrides) -> ClipRecord:
    data = {
        "id": clip_id,
        "clip_url": f"https://clips.twitch.tv/{clip_id}",
        "title": f"Clip {clip_id}",
        "game": "Path of Exile",
        "streamer": "someone",
        "status": "approved",
        "submitted_at": hours_ago(1),
    }
    data.update(overrides)
    return ClipRecord(**data)


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
