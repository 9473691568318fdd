"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity.
  • On shutdown: dispose the engine cleanly.

Routers:
  • /projects — postings, applications and reviews
  • /health   — shallow liveness probe

Errors:
  • MarketplaceError subclasses render as {"message", "code", ...} with
    the status they carry.
  • Malformed bodies / query parameters are 400 validation_error.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import engine
from app.routers.applications import router as applications_router
from app.routers.projects import router as projects_router
from app.services.errors import MarketplaceError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Starting %s (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)

    # Startup — verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except (SQLAlchemyError, OSError):
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    yield  # ← application runs here

    # Shutdown — clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── App ─────────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        "Construction job marketplace — contractors post projects, "
        "workers apply, contractors accept or reject."
    ),
    lifespan=lifespan,
)

# Mount routers
app.include_router(projects_router, prefix="/projects")
app.include_router(applications_router, prefix="/projects")


# ── Error handlers ──────────────────────────────────────────
@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(_request: Request, exc: MarketplaceError) -> JSONResponse:
    content = {"message": exc.message, "code": exc.code, **exc.details}
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "message": "Invalid request data.",
            "code": "validation_error",
            "errors": [
                {key: value for key, value in error.items() if key not in ("ctx", "input")}
                for error in exc.errors()
            ],
        }),
    )


# ── Health check ────────────────────────────────────────────
@app.get(
    "/health",
    tags=["System"],
    summary="Liveness probe",
)
async def health_check() -> dict[str, str]:
    """Shallow health check — confirms the process is alive."""
    return {"status": "healthy"}
