from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings
from app.exceptions import BarterError
from app.routers import likes, suggestions, trades
from app.services.identity import IdentityResolver
from app.store.base import BarterRepository
from app.store.snapshot import load_snapshot
from app.store.supabase_store import SupabaseRepository
from app.utils.hasher import get_timestamp
from app.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_repository(settings: Settings) -> Optional[BarterRepository]:
    """Supabase when configured, else a local CSV snapshot, else nothing."""
    if settings.supabase_enabled:
        logger.info("Using Supabase store at %s", settings.supabase_url)
        return SupabaseRepository.from_settings(settings)
    if settings.snapshot_dir:
        return load_snapshot(settings.snapshot_dir)
    logger.warning("No data store configured; data endpoints will return 503")
    return None


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[BarterRepository] = None,
) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Barter API",
        description="Item bartering backend with three-way trade suggestions",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.repository = repository if repository is not None else build_repository(settings)
    app.state.identity = IdentityResolver(settings.jwt_secret, settings.jwt_audience)

    # The mobile and web clients call the API directly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Suggestions-Truncated"],
    )

    @app.exception_handler(BarterError)
    async def barter_error_handler(request: Request, exc: BarterError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(suggestions.router)
    app.include_router(likes.router)
    app.include_router(trades.router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "timestamp": get_timestamp()}

    return app


app = create_app()
