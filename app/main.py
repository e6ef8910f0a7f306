import asyncio
import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv  # load .env variables

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sqlalchemy.exc import DBAPIError, OperationalError

import app.database as database
from app.errors import ApiError, error_body
from app.utils.logger import configure_logging

# ----- Load environment variables -----
load_dotenv()

# ----- Logging -----
configure_logging()
_LOGGER = logging.getLogger(__name__)

# ----- Routers -----
from app.routes.events import router as events_router  # noqa: E402
from app.routes.parrot import router as parrot_router  # noqa: E402


def sqlite_fallback_allowed() -> bool:
    """Whether startup may swap an unreachable store for the local SQLite file.

    ``DB_ALLOW_SQLITE_FALLBACK`` decides when set. Otherwise the fallback is
    only allowed when SQLite is already the configured store.
    """

    configured = os.getenv("DB_ALLOW_SQLITE_FALLBACK")
    if configured is not None:
        return configured.lower() in {"1", "true", "yes", "on"}
    return database.CURRENT_DATABASE_URL == database.DEFAULT_SQLITE_URL


async def ensure_database() -> None:
    """Create the tables, retrying while the store is still coming up."""

    max_attempts = int(os.getenv("DB_INIT_MAX_ATTEMPTS", "10"))
    base_delay = float(os.getenv("DB_INIT_RETRY_SECONDS", "1.0"))

    attempt = 0
    while True:
        attempt += 1
        try:
            await database.init_models()
        except (OperationalError, DBAPIError, OSError) as exc:  # pragma: no cover - depends on timing
            if attempt >= max_attempts:
                if sqlite_fallback_allowed() and (
                    database.CURRENT_DATABASE_URL != database.DEFAULT_SQLITE_URL
                ):
                    _LOGGER.error(
                        "Database not reachable after %s attempts: %s."
                        " Falling back to local SQLite for development.",
                        attempt,
                        exc,
                    )
                    await database.engine.dispose()
                    database.configure_engine(database.DEFAULT_SQLITE_URL)
                    attempt = 0
                    continue

                _LOGGER.exception("Database not reachable after %s attempts", attempt)
                raise

            wait_time = base_delay * min(2 ** (attempt - 1), 8)
            _LOGGER.warning(
                "Database not ready (attempt %s/%s): %s. Retrying in %.1f seconds...",
                attempt,
                max_attempts,
                exc,
                wait_time,
            )
            await asyncio.sleep(wait_time)
        else:
            _LOGGER.info("Event board API started and database tables ensured.")
            return


@asynccontextmanager
async def lifespan(_: FastAPI):
    await ensure_database()
    try:
        yield
    finally:
        await database.engine.dispose()


# ----- FastAPI app -----
app = FastAPI(
    title="Event Board API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ----- CORS (enabled only if ALLOWED_ORIGINS is set) -----
raw_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
if raw_origins:
    allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        expose_headers=["X-Request-ID"],
        max_age=86400,
    )

# ----- Include routers -----
app.include_router(events_router)
app.include_router(parrot_router)


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Render taxonomy errors raised outside a controller (e.g. while resolving dependencies)."""

    _LOGGER.error(exc.message, exc_info=exc)
    return JSONResponse(error_body(exc), status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Anything else escaping a route becomes a 500 with the usual envelope."""

    _LOGGER.error("Unhandled error: %s", exc, exc_info=exc)
    return JSONResponse(error_body(exc), status_code=500)


# ----- Health check endpoint -----
@app.get("/health", tags=["meta"])
async def health():
    return {"ok": True}
