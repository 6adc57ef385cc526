import os
from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from models import Base

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
DEBUG = ENVIRONMENT == "dev"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./localharvest.db")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = "HS256"
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", 260000))

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Fixed search radius for the nearby query, not exposed to callers
NEARBY_RADIUS_METERS = 10000

# Marketplace policy switches
ALLOW_DUPLICATE_INTERESTS = _env_flag("ALLOW_DUPLICATE_INTERESTS", True)
ENFORCE_ORDER_TRANSITIONS = _env_flag("ENFORCE_ORDER_TRANSITIONS", False)


def _async_url(database_url: str) -> str:
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def _sync_url(database_url: str) -> str:
    return (
        database_url
        .replace("postgresql+asyncpg://", "postgresql://")
        .replace("sqlite+aiosqlite://", "sqlite://")
    )


def build_async_engine(database_url: str = None) -> AsyncEngine:
    url = _async_url(database_url or DATABASE_URL)

    if url.startswith("postgresql+asyncpg://"):
        base_url = url.split("?")[0] if "?" in url else url
        return create_async_engine(
            f"{base_url}?prepared_statement_cache_size=0",
            echo=False,
            pool_pre_ping=False,
            pool_size=5,
            max_overflow=0
        )

    return create_async_engine(url, echo=False)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def get_db(request: Request):
    session_factory = getattr(request.app.state, "sessionmaker", None)
    if session_factory is None:
        raise Exception("Database not configured")
    async with session_factory() as session:
        yield session


async def init_db(engine: AsyncEngine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_sync_engine(database_url: str = None):
    url = database_url or DATABASE_URL
    if not url:
        raise Exception("Database not configured")
    return create_engine(_sync_url(url))
