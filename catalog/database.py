from urllib.parse import parse_qs, urlparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from catalog.config import settings


def clean_asyncpg_url(url: str) -> tuple[str, dict]:
    """
    Clean database URL for asyncpg compatibility.
    Converts postgresql:// to postgresql+asyncpg://, drops query params
    (asyncpg rejects psycopg2-style params) and turns sslmode into connect_args.
    Returns (cleaned_url, connect_args_dict)
    """
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if not url.startswith("postgresql+asyncpg://"):
        return url, {}

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    connect_args = {}
    if "sslmode" in query_params:
        connect_args["ssl"] = query_params["sslmode"][0] != "disable"

    return parsed._replace(query="").geturl(), connect_args


def build_engine(url: str) -> AsyncEngine:
    database_url, connect_args = clean_asyncpg_url(url)
    options = {"echo": False, "future": True, "pool_pre_ping": True, "connect_args": connect_args}
    if database_url.startswith("postgresql+asyncpg://"):
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
    return create_async_engine(database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = build_engine(settings.database_url)
AsyncSessionLocal = build_session_factory(async_engine)

# Base class for models
Base = declarative_base()


# Dependency for FastAPI to get async database session
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
