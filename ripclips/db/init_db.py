# ripclips/db/init_db.py
import logging
from ripclips.db.session import engine
from ripclips.db.base import Base

# 👇 importa todos los modelos que deben existir en la DB
from ripclips.clips.models import Clip, ClipLike, ClipComment  # noqa: F401

log = logging.getLogger("uvicorn")


async def init_models():
    """
    Crea/verifica todas las tablas declaradas en Base.metadata
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("✅ DB init: tablas creadas/verificadas.")
    except Exception as e:
        log.error(f"❌ DB init falló: {e!r}")
