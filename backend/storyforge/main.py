from __future__ import annotations
"""StoryForge — FastAPI application entry point.

Mounts all API routes, configures CORS, serves generated media,
and initializes the database on startup.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import update
from starlette.exceptions import HTTPException as StarletteHTTPException

from storyforge.api.router import api_router
from storyforge.config import get_settings
from storyforge.database import async_session_factory, close_db, init_db

settings = get_settings()

# Root logging for the app and its libraries
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare media and tables, recover interrupted jobs, dispose the engine on exit."""
    logger.info("StoryForge starting up...")
    logger.info("USE_MOCK_API: %s, IMAGE_PROVIDER: %s", settings.USE_MOCK_API, settings.IMAGE_PROVIDER)

    os.makedirs(settings.MEDIA_VOLUME, exist_ok=True)

    if settings.AUTO_CREATE_TABLES:
        await init_db()
    else:
        logger.info("Skipping init_db (tables assumed to exist)")

    # Work in flight when the process stopped is lost; let users re-trigger it.
    if settings.RECOVER_STUCK_ON_STARTUP:
        try:
            await recover_stuck_jobs()
        except Exception as e:
            logger.warning("Startup recovery failed (non-fatal): %s", e)

    yield

    await close_db()
    logger.info("StoryForge shut down")


async def recover_stuck_jobs() -> int:
    """Mark assets, scenes and exports left in a transient status as failed.

    Mapping:
      assets   generating            → failed
      scenes   rendering             → failed
      exports  pending, processing   → failed
    """
    from storyforge.models import Asset, Export, Scene

    transitions = [
        (Asset, Asset.generation_status, ["generating"]),
        (Scene, Scene.render_status, ["rendering"]),
        (Export, Export.status, ["pending", "processing"]),
    ]

    total_reset = 0
    async with async_session_factory() as session:
        for model, column, stuck in transitions:
            result = await session.execute(
                update(model).where(column.in_(stuck)).values({column: "failed"})
                .execution_options(synchronize_session=False)
            )
            if result.rowcount > 0:
                logger.warning(
                    "Startup recovery: reset %d %s row(s) %s → failed",
                    result.rowcount, model.__tablename__, "/".join(stuck),
                )
                total_reset += result.rowcount
        await session.commit()

    if total_reset > 0:
        logger.info("Startup recovery: %d item(s) recovered total", total_reset)
    else:
        logger.info("Startup recovery: no stuck items found")
    return total_reset


app = FastAPI(
    title="StoryForge API",
    description="Asset-first storyboard creation: lock assets, compose scenes, render frames",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render errors as ``{"error": message}``; dict details are passed through."""
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        messages.append(f"{'.'.join(loc) or 'request'}: {err.get('msg', 'invalid')}")
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


app.include_router(api_router)

# Generated images and exports
os.makedirs(settings.MEDIA_VOLUME, exist_ok=True)
app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=settings.MEDIA_VOLUME), name="media")


@app.get("/")
async def root():
    """Service banner."""
    return {
        "service": settings.APP_NAME,
        "status": "running",
        "mock_mode": settings.USE_MOCK_API,
    }


@app.get("/health")
async def health():
    """Liveness plus the configured database and image provider."""
    return {
        "status": "healthy",
        "database": "mysql" if settings.is_mysql else settings.DATABASE_URL.split(":", 1)[0],
        "image_provider": "mock" if settings.USE_MOCK_API else settings.IMAGE_PROVIDER,
        "mock_mode": settings.USE_MOCK_API,
    }
