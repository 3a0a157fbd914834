# ripclips/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ripclips.core.config import settings
from ripclips.db.init_db import init_models

# routers
from ripclips.feed.router import router as feed_router
from ripclips.clips.router import router as clips_router

log = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("🚀 Iniciando servicio…")
    await init_models()
    log.info("✅ Startup listo.")
    yield


app = FastAPI(title="RipClips API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health/")
async def health():
    return {"ok": True, "service": "ripclips"}


# routers
app.include_router(feed_router)   # /api/feed/...
app.include_router(clips_router)  # /api/clips/...
