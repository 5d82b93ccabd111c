"""
Inkwell FastAPI application entry point.

Content platform: users, posts, engagement, follows, workspaces/pages/blocks, chat.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from inkwell import __version__
from inkwell.config import get_settings
from inkwell.db.session import check_db_connection, engine
from inkwell.lifecycle import CleanupManager
from inkwell.worker import WorkerPool

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Inkwell starting")
    settings = get_settings()
    cleanup = CleanupManager()
    try:
        try:
            settings.validate()
        except ValueError as e:
            logger.critical("Invalid configuration: %s", e)
            raise

        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise
        cleanup.register("database engine", engine.dispose)

        pool = WorkerPool(settings.worker_pool_size, task_timeout=settings.worker_task_timeout)
        pool.start()
        app.state.worker_pool = pool
        cleanup.register("worker pool", lambda: pool.shutdown_with_timeout(settings.shutdown_timeout))

        yield
    finally:
        logger.info("Inkwell shutting down")
        app.state.worker_pool = None
        errors = await cleanup.cleanup_with_timeout(settings.shutdown_timeout)
        if errors:
            logger.error("Shutdown finished with %d cleanup error(s)", len(errors))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from inkwell.api.responses import register_exception_handlers

    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    # Mount API routes
    from inkwell.api.auth import router as auth_router
    from inkwell.api.comments import router as comments_router
    from inkwell.api.conversations import router as conversations_router
    from inkwell.api.pages import blocks_router
    from inkwell.api.pages import router as pages_router
    from inkwell.api.posts import router as posts_router
    from inkwell.api.tags import router as tags_router
    from inkwell.api.users import router as users_router
    from inkwell.api.workspaces import router as workspaces_router

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(posts_router, prefix="/api/posts", tags=["posts"])
    app.include_router(comments_router, prefix="/api/comments", tags=["comments"])
    app.include_router(tags_router, prefix="/api/tags", tags=["tags"])
    app.include_router(workspaces_router, prefix="/api/workspaces", tags=["workspaces"])
    app.include_router(pages_router, prefix="/api/pages", tags=["pages"])
    app.include_router(blocks_router, prefix="/api/blocks", tags=["blocks"])
    app.include_router(conversations_router, prefix="/api/conversations", tags=["chat"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
