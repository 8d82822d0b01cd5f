from __future__ import annotations

from collections.abc import AsyncGenerator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from frc_draft.config import settings

_ASYNCPG_SSL_MODES = {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}


def normalize_async_database_url(url: str) -> str:
    """
    Hosted Postgres providers hand out postgres:// or postgresql:// URLs, often with ?sslmode=require.
    The runtime engine needs postgresql+asyncpg://, and asyncpg only understands `ssl`, not `sslmode`.
    Other schemes (sqlite+aiosqlite for tests) pass through untouched.
    """
    u = (url or "").strip()
    if u.startswith("postgres://"):
        u = "postgresql+asyncpg://" + u[len("postgres://") :]
    elif u.startswith("postgresql://"):
        u = "postgresql+asyncpg://" + u[len("postgresql://") :]

    if not u.startswith("postgresql+asyncpg://"):
        return u

    parts = urlsplit(u)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    sslmode = params.pop("sslmode", None)
    if sslmode and sslmode.lower() in _ASYNCPG_SSL_MODES:
        params.setdefault("ssl", sslmode.lower())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params, doseq=True), parts.fragment))


def create_engine() -> AsyncEngine:
    url = normalize_async_database_url(settings.database_url)
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


engine = create_engine()
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
