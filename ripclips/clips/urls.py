# ripclips/clips/urls.py
import re
from urllib.parse import urlencode

# Twitch tiene dos formatos:
#   viejo: https://clips.twitch.tv/ClipID
#   nuevo: https://www.twitch.tv/channel/clip/ClipID
TWITCH_CLIP_RE = re.compile(r"(?:clips\.twitch\.tv/|twitch\.tv/\w+/clip/)([A-Za-z0-9_-]+)")
# https://www.youtube.com/watch?v=VIDEO_ID  |  https://youtu.be/VIDEO_ID
YOUTUBE_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([A-Za-z0-9_-]{11})")

# validación estricta al enviar: solo https y host conocido
SUBMIT_TWITCH_RE = re.compile(r"^https://(?:clips\.twitch\.tv|www\.twitch\.tv/\w+/clip)/[\w-]+")
SUBMIT_YOUTUBE_RE = re.compile(r"^https://(?:www\.youtube\.com/watch\?v=|youtu\.be/)[\w-]+")


def is_valid_clip_url(url: str) -> bool:
    return bool(SUBMIT_TWITCH_RE.match(url) or SUBMIT_YOUTUBE_RE.match(url))


def extract_twitch_clip_id(url: str) -> str | None:
    m = TWITCH_CLIP_RE.search(url)
    return m.group(1) if m else None


def extract_youtube_video_id(url: str) -> str | None:
    m = YOUTUBE_RE.search(url)
    return m.group(1) if m else None


def to_embed_url(clip_url: str, parents: list[str]) -> str:
    """
    URL para el <iframe> del reproductor.
    Si ya es un embed, o no se reconoce el formato, se devuelve tal cual.
    """
    if "clips.twitch.tv/embed" in clip_url or "youtube.com/embed" in clip_url:
        return clip_url

    twitch_id = extract_twitch_clip_id(clip_url)
    if twitch_id:
        # Twitch exige un ?parent= por cada dominio que incrusta el clip
        params = [("clip", twitch_id)]
        params += [("parent", p) for p in parents]
        params += [("autoplay", "false"), ("muted", "false")]
        return f"https://clips.twitch.tv/embed?{urlencode(params)}"

    video_id = extract_youtube_video_id(clip_url)
    if video_id:
        return f"https://www.youtube.com/embed/{video_id}?autoplay=0"

    return clip_url
