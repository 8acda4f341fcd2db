"""Closet Filter FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from closet_filter.api.config import Settings, get_settings
from closet_filter.api.routers import filters, items
from closet_filter.config.logging_config import get_logger
from closet_filter.errors import StorageFailure, ValidationError
from closet_filter.filters.manager import FilterManager
from closet_filter.services.search import ItemSearchService
from closet_filter.services.snapshot import SnapshotStore
from closet_filter.store.repository import ItemRepository

logger = get_logger("api")


def _restore_filter_state(manager: FilterManager, store: SnapshotStore) -> None:
    try:
        state = store.load()
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable filter snapshot: {e}")
        return
    if state is not None:
        manager.restore_state(state)


def create_app(
    repository: Optional[ItemRepository] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        repository: Item store to serve. When omitted, one is opened at
            ``settings.database_path`` on startup and closed on shutdown.
        settings: API settings. Defaults to environment-driven settings.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = repository if repository is not None else ItemRepository.open(settings.database_path)
        manager = FilterManager()

        if settings.persist_filter_state:
            store = SnapshotStore(settings.snapshot_path)
            _restore_filter_state(manager, store)
            manager.subscribe(store.save)

        app.state.settings = settings
        app.state.repository = repo
        app.state.filter_manager = manager
        app.state.search_service = ItemSearchService(repo)
        logger.info(f"{settings.app_name} started ({repo.total_count()} items)")
        try:
            yield
        finally:
            if repository is None:
                repo.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        description="API for filtering and searching a clothing catalog",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # Include routers
    app.include_router(items.router, prefix="/api/items", tags=["Items"])
    app.include_router(filters.router, prefix="/api/filters", tags=["Filters"])

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "docs": "/docs",
            "endpoints": {
                "items": "/api/items",
                "filters": "/api/filters",
            },
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        try:
            count = request.app.state.repository.total_count()
            return {
                "status": "healthy",
                "database": "connected",
                "total_items": count,
            }
        except StorageFailure as e:
            return {
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e),
            }

    return app


app = create_app()
