"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from infrastructure.connectivity import ConnectivityMonitor
from infrastructure.database import LocalStore
from infrastructure.logging import configure_logging
from infrastructure.outbox import HttpRemoteGateway, SyncOrchestrator, SyncQueueManager
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from records.application import RecordService
from records.presentation import preferences_router
from records.presentation import router as records_router
from shared_kernel.storage.exceptions import StorageError
from sync.presentation import router as sync_router

logger = structlog.get_logger()


@asynccontextmanager
async def initialize_sync_components(app: FastAPI):
    """Build the sync components and keep them on ``app.state``.

    Components are torn down in reverse order of construction.
    """
    settings = get_settings()
    sync_settings = settings.sync

    store = LocalStore(settings.store)
    await store.initialize()

    queue = SyncQueueManager(store, max_attempts=sync_settings.max_attempts)
    monitor = ConnectivityMonitor(sync_settings)
    gateway = HttpRemoteGateway(sync_settings)
    orchestrator = SyncOrchestrator(
        store=store,
        queue=queue,
        connectivity=monitor,
        gateway=gateway,
        settings=sync_settings,
    )

    app.state.local_store = store
    app.state.sync_queue = queue
    app.state.connectivity_monitor = monitor
    app.state.sync_orchestrator = orchestrator
    app.state.record_service = RecordService(store=store, queue=queue)

    try:
        await orchestrator.start()
        yield
    finally:
        await orchestrator.stop()
        await gateway.aclose()
        await monitor.aclose()
        await store.close()


@asynccontextmanager
async def krushimind_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Local store, sync queue, connectivity monitor, gateway and orchestrator
    """
    configure_logging(debug=get_settings().debug)
    async with initialize_sync_components(app):
        yield


app = FastAPI(
    title="KrushiMind Sync",
    description="Offline-first storage and background sync for the KrushiMind farmer app",
    version=__version__,
    lifespan=krushimind_lifespan,
)

app.include_router(records_router)
app.include_router(preferences_router)
app.include_router(sync_router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Report local storage failures as a temporarily unavailable service."""
    logger.error(
        "storage_error",
        path=request.url.path,
        collection=exc.collection,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Local storage is unavailable"},
    )


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
