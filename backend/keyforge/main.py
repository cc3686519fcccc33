"""
FastAPI application entrypoint.

Lifespan:
  • On startup: build the KeyStore (memory or database), wrap it in a
    KeyLifecycleService, park it on app.state, optionally seed a
    "default" key.
  • On shutdown: dispose the engine cleanly (database store only).

Routers:
  • /api/keys — API key lifecycle
  • /health   — shallow liveness probe
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from keyforge.core.config import Settings, settings
from keyforge.core.database import build_engine, build_session_factory
from keyforge.keys.errors import DuplicateId, InvalidArgument, KeyServiceError
from keyforge.routers.keys import router as keys_router
from keyforge.services.key_lifecycle import KeyLifecycleService
from keyforge.services.key_store import InMemoryKeyStore
from keyforge.services.sql_key_store import SqlKeyStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Error mapping ───────────────────────────────────────────
async def key_service_error_handler(_request: Request, exc: KeyServiceError) -> JSONResponse:
    """Every service failure → {"error": kind, "message": text} with its status."""
    if isinstance(exc, DuplicateId):
        logger.error("Uniqueness violation surfaced to a client: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message},
    )


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body validation failures are reported as invalid_argument (400)."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": InvalidArgument.kind, "message": problems or "invalid request"},
    )


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the application for the given settings."""

    # ── Lifespan ────────────────────────────────────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle."""
        engine = None

        if app_settings.KEY_STORE == "database":
            engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.DEBUG)
            try:
                async with engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connection verified ✓")
            except Exception:
                logger.warning(
                    "Could not reach the database on startup. "
                    "The app will start, but requests will fail until the DB is available."
                )
            store = SqlKeyStore(build_session_factory(engine))
        else:
            store = InMemoryKeyStore()
            logger.info("Using in-memory key store (keys are lost on restart)")

        service = KeyLifecycleService(
            store,
            prefix=app_settings.KEY_PREFIX,
            nbytes=app_settings.KEY_BYTES,
        )
        app.state.key_service = service

        if app_settings.SEED_DEFAULT_KEY and not await service.list_keys():
            seeded = await service.create_key("default")
            logger.info("Seeded default API key %s", seeded.id)

        yield  # ← application runs here

        if engine is not None:
            await engine.dispose()
            logger.info("Database engine disposed ✓")

    # ── App ─────────────────────────────────────────────────
    app = FastAPI(
        title=app_settings.APP_NAME,
        version="0.1.0",
        description="Issue, list, reveal, update and revoke API keys.",
        lifespan=lifespan,
    )

    app.add_exception_handler(KeyServiceError, key_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Mount routers
    app.include_router(keys_router, prefix="/api")

    # ── Health check ────────────────────────────────────────
    @app.get(
        "/health",
        tags=["System"],
        summary="Liveness probe",
    )
    async def health_check() -> dict[str, str]:
        """Shallow health check — confirms the process is alive."""
        return {"status": "healthy"}

    return app


app = create_app()
