"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from portal import __version__
from portal.api.v1 import router as v1_router
from portal.core.config import Settings, get_settings
from portal.core.database import engine
from portal.core.errors import register_error_handlers
from portal.core.logging_config import configure_logging
from portal.models import Base

logger = logging.getLogger(__name__)

# Request log lines are cut to this many characters.
MAX_LOG_LINE = 80


def _mount_frontend(app: FastAPI, settings: Settings) -> None:
    """Serve the built SPA: real files as-is, any other non-API GET falls back to index.html."""
    if not settings.STATIC_DIR:
        return
    static_dir = Path(settings.STATIC_DIR).resolve()
    index_file = static_dir / "index.html"
    if not index_file.is_file():
        logger.warning("STATIC_DIR %s has no index.html; frontend not served", static_dir)
        return

    assets_dir = static_dir / "assets"
    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    @app.get("/{full_path:path}", include_in_schema=False)
    def spa_fallback(full_path: str) -> FileResponse:
        if full_path == settings.API_PREFIX.lstrip("/") or full_path.startswith(
            settings.API_PREFIX.lstrip("/") + "/"
        ):
            raise HTTPException(status_code=404)
        candidate = (static_dir / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(static_dir):
            return FileResponse(candidate)
        return FileResponse(index_file)

    logger.info("Serving frontend from %s", static_dir)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="User Portal API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or (["*"] if not settings.is_production else []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path.startswith(settings.API_PREFIX):
            duration_ms = (time.perf_counter() - start) * 1000
            line = f"{request.method} {path} {response.status_code} in {duration_ms:.0f}ms"
            if len(line) > MAX_LOG_LINE:
                line = line[: MAX_LOG_LINE - 1] + "…"
            logger.info(line)
        return response

    register_error_handlers(app)

    @app.on_event("startup")
    def initialize_database() -> None:
        if not settings.AUTO_CREATE_TABLES:
            return
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError:
            logger.exception("Database initialization failed. Check DATABASE_URL.")

    app.include_router(v1_router, prefix=settings.API_PREFIX)
    _mount_frontend(app, settings)
    return app


app = create_app()
