# app/database.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _default_db_url() -> str:
    """File-based SQLite at the project root when no DATABASE_URL is provided."""

    root = Path(__file__).resolve().parents[1]
    return f"sqlite+aiosqlite:///{(root / 'events.db').as_posix()}"


def _translate_sslmode(value: str) -> Optional[str]:
    """Map a libpq ``sslmode`` onto asyncpg's ``ssl`` flag (``None`` = driver default)."""

    normalized = value.strip().lower()
    if normalized in {"require", "verify-ca", "verify-full"}:
        return "true"
    if normalized == "disable":
        return "false"
    return None


def normalize_database_url(raw_url: Optional[str]) -> Optional[str]:
    """Force an async driver onto Postgres URLs.

    ``postgres://`` and sync drivers become ``postgresql+asyncpg://``; a libpq
    ``sslmode`` query parameter is rewritten for asyncpg. Anything SQLAlchemy
    cannot parse is returned untouched.
    """

    if not raw_url:
        return raw_url

    try:
        url = make_url(raw_url)
    except ArgumentError:
        return raw_url

    driver = url.drivername.lower()
    if driver in {"postgres", "postgresql"} or (
        driver.startswith("postgresql+") and driver != "postgresql+asyncpg"
    ):
        url = url.set(drivername="postgresql+asyncpg")

    if url.drivername == "postgresql+asyncpg" and "sslmode" in url.query:
        query = dict(url.query)
        translated = _translate_sslmode(query.pop("sslmode"))
        if translated is not None:
            query["ssl"] = translated
        url = url.set(query=query)

    return url.render_as_string(hide_password=False)


def database_url_from_env(env: Mapping[str, str]) -> Optional[str]:
    for key in ("DATABASE_URL", "POSTGRES_URL"):
        normalized = normalize_database_url(env.get(key))
        if normalized:
            return normalized
    return None


DEFAULT_SQLITE_URL: str = _default_db_url()
DATABASE_URL: str = database_url_from_env(os.environ) or DEFAULT_SQLITE_URL

ECHO = os.getenv("SQLALCHEMY_ECHO", "0").lower() in {"1", "true", "yes"}

Base = declarative_base()

# Reassigned by configure_engine(); read them through the module, not by import.
engine: AsyncEngine
SessionLocal: sessionmaker
CURRENT_DATABASE_URL: str


def build_session_factory(bind_engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=bind_engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def configure_engine(database_url: str) -> None:
    """Point the global engine/session factory pair at ``database_url``."""

    global engine, SessionLocal, CURRENT_DATABASE_URL

    engine = create_async_engine(database_url, echo=ECHO, pool_pre_ping=True)
    SessionLocal = build_session_factory(engine)
    CURRENT_DATABASE_URL = database_url


configure_engine(DATABASE_URL)


def new_session() -> AsyncSession:
    """Open a session on whichever engine is currently configured."""

    return SessionLocal()


async def init_models(bind_engine: Optional[AsyncEngine] = None) -> None:
    """Create every mapped table that does not exist yet."""

    import app.models  # noqa: F401  - registers the mapped classes on Base

    async with (bind_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class TransactionManager:
    """Run a unit of work inside a single database transaction.

    The callback receives the session; the transaction commits when it
    returns and rolls back when it raises.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession] = new_session) -> None:
        self._session_factory = session_factory

    async def execute(self, callback: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self._session_factory() as session:
            async with session.begin():
                return await callback(session)
