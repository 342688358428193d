from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse, Response
from starlette.requests import ClientDisconnect
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from movieclub.config import Settings
from movieclub.database import build_engine, build_session_factory
from movieclub.errors import (
    CatalogUnavailableError,
    EntryConflictError,
    InvalidInputError,
    OperationCancelled,
    StorageError,
)
from movieclub.middleware.security import SecurityHeadersMiddleware
from movieclub.routes import auth, dashboard, entries, movies, ratings
from movieclub.services.tmdb_service import TMDBService

logger = logging.getLogger(__name__)

# Status used when the client is gone and no body is owed
CLIENT_CLOSED_REQUEST = 499

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=LOG_LEVELS.get(level.lower(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: log configuration
    Shutdown: release pooled database connections
    """
    settings: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info("🎬 Movie Club API Starting...")
    logger.info(f"   Port: {settings.port}")
    logger.info(f"   Persons: {', '.join(code for code, _ in settings.persons)}")
    logger.info(f"   Secure cookies: {settings.secure_cookies}")
    logger.info("=" * 60)

    yield

    logger.info("=" * 60)
    logger.info("🛑 Movie Club API Shutting Down...")
    app.state.engine.dispose()
    logger.info("   Database connections closed")
    logger.info("=" * 60)


# ============================================
# Exception Handlers
# ============================================

def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(EntryConflictError)
    async def entry_conflict_handler(request: Request, exc: EntryConflictError):
        return JSONResponse(status_code=409, content={"detail": exc.message})

    @app.exception_handler(CatalogUnavailableError)
    async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
        logger.error(f"TMDB unavailable: {exc.message}")
        return JSONResponse(status_code=502, content={"detail": "Movie catalog unavailable, try again later"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.exception_handler(OperationCancelled)
    async def cancelled_handler(request: Request, exc: OperationCancelled):
        logger.debug(f"Request cancelled: {request.method} {request.url.path}: {exc.message}")
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    @app.exception_handler(ClientDisconnect)
    async def client_disconnect_handler(request: Request, exc: ClientDisconnect):
        logger.debug(f"Client disconnected: {request.method} {request.url.path}")
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ============================================
# Application Factory
# ============================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API with its own engine, session factory and TMDB client.

    Everything request handlers need hangs off app.state; there is no
    module-level app or engine.
    """
    if settings is None:
        settings = Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Movie Club API",
        description="Shared movie watch list with group ratings",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.tmdb_service = TMDBService(settings.tmdb_api_key, timeout=settings.tmdb_timeout)

    register_exception_handlers(app)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.secure_cookies)

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness check for monitoring"""
        return {
            "status": "healthy",
            "api_version": "1.0.0",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(movies.router)
    app.include_router(entries.router)
    app.include_router(entries.group_router)
    app.include_router(ratings.router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level if settings.log_level != "warn" else "warning",
    )
