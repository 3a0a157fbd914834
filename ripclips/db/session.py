# ripclips/db/session.py
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from ripclips.core.config import settings

db_url = settings.DATABASE_URL
timeout = settings.DB_CONNECT_TIMEOUT

# Timeouts cortos: si la DB no responde → falla rápido y el repositorio
# lo convierte en TransientStoreError
engine_kwargs: dict = {"pool_pre_ping": True}

if db_url.startswith("postgresql+psycopg"):
    engine_kwargs["connect_args"] = {"connect_timeout": timeout}
elif db_url.startswith("postgresql+asyncpg"):
    engine_kwargs["connect_args"] = {
        "timeout": timeout,
        "server_settings": {"client_encoding": "UTF8"},
    }

if db_url.startswith("postgresql"):
    engine_kwargs.update(pool_recycle=300, pool_size=5, max_overflow=10)

engine = create_async_engine(db_url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
