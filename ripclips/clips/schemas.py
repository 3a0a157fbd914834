# ripclips/clips/schemas.py
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from ripclips.clips.urls import is_valid_clip_url

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ClipStatus = Literal["pending", "approved", "rejected"]


def resolve_timestamp(value: Any) -> datetime:
    """
    Normaliza cualquier timestamp que llegue del store a un datetime UTC aware.

    - datetime aware (timestamp del servidor) → a UTC
    - datetime naive, ISO string o epoch (fecha del cliente) → se asume UTC
    - dict {"seconds": ...} (formato de Firestore) → epoch en segundos
    - None o basura → EPOCH (edad máxima, el hot score lo manda al fondo)
    """
    if value is None:
        return EPOCH

    if isinstance(value, dict) and "seconds" in value:
        value = value["seconds"] + value.get("nanoseconds", 0) / 1e9

    if isinstance(value, bool):
        return EPOCH

    if isinstance(value, (int, float)):
        # los clientes JS mandan milisegundos
        if value > 1e11:
            value = value / 1000
        return datetime.fromtimestamp(value, tz=timezone.utc)

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return EPOCH

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    return EPOCH


class ClipRecord(BaseModel):
    """
    Lo que el motor del feed ve de un clip.
    Se construye una sola vez en la frontera del store (ClipRecord.model_validate(row)).
    """
    id: str
    clip_url: str
    title: str
    game: str
    streamer: str
    description: str = ""
    submitted_by: str = "Anonymous"
    status: ClipStatus = "pending"
    submitted_at: datetime = EPOCH

    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    likes: int = 0
    views: int = 0
    comments: int = 0

    streamer_profile_image_url: str | None = None
    game_box_art_url: str | None = None

    class Config:
        from_attributes = True

    @field_validator("submitted_at", mode="before")
    @classmethod
    def _resolve_submitted_at(cls, v: Any) -> datetime:
        return resolve_timestamp(v)

    @field_validator("reviewed_at", mode="before")
    @classmethod
    def _resolve_reviewed_at(cls, v: Any) -> datetime | None:
        return None if v is None else resolve_timestamp(v)

    @field_validator("likes", "views", "comments", mode="before")
    @classmethod
    def _counter_default(cls, v: Any) -> int:
        # filas viejas pueden traer NULL
        return max(0, int(v or 0))

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, v: Any) -> str:
        return v or ""


class ClipOut(ClipRecord):
    embed_url: str


class ClipCreate(BaseModel):
    clip_url: str = Field(..., max_length=512)
    title: str = Field(..., min_length=1, max_length=200)
    game: str = Field(..., min_length=1, max_length=120)
    streamer: str = Field(..., min_length=1, max_length=120)
    description: str = Field("", max_length=5000)
    # nombre visible del que envía; sin login → "Anonymous"
    submitted_by: str | None = Field(None, max_length=120)

    streamer_profile_image_url: str | None = None
    game_box_art_url: str | None = None

    @field_validator("title", "game", "streamer", "clip_url", mode="before")
    @classmethod
    def _strip_required(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("field is required")
        return v

    @field_validator("clip_url")
    @classmethod
    def _valid_clip_url(cls, v: str) -> str:
        if not is_valid_clip_url(v):
            raise ValueError("Please enter a valid Twitch clip or YouTube URL")
        return v


class ClipReject(BaseModel):
    reason: str = Field("Quality standards not met", min_length=1, max_length=500)


# --------- COMENTARIOS ---------


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    user_display_name: str | None = Field(None, max_length=120)

    @field_validator("content", mode="before")
    @classmethod
    def _strip_content(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class CommentOut(BaseModel):
    id: int
    clip_id: str
    user_id: str
    user_display_name: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("created_at", mode="before")
    @classmethod
    def _resolve_created_at(cls, v: Any) -> datetime:
        return resolve_timestamp(v)
