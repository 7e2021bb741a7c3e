"""Main FastAPI application for Pine."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from backend.api import activities_router, slots_router, stats_router, sync_router, export_router
from backend.config import (
    get_auto_sync_seconds,
    get_catalog_path,
    get_data_dir,
    get_remote_timeout,
    get_supabase_key,
    get_supabase_url,
)
from backend.services import (
    ActivityCatalog,
    JsonFileStorage,
    LedgerBinder,
    SupabaseRemoteStore,
    SyncReconciler,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    logger.info("Starting Pine application...")
    catalog = ActivityCatalog.from_file(get_catalog_path())
    storage = JsonFileStorage(get_data_dir() / "pine.json")
    app.state.catalog = catalog
    app.state.storage = storage
    app.state.binder = LedgerBinder(storage, catalog)
    logger.info(f"Local store at {storage.path}")

    remote = None
    app.state.reconciler = None
    url, key = get_supabase_url(), get_supabase_key()
    if url and key:
        remote = SupabaseRemoteStore(url, key, timeout=get_remote_timeout())
        reconciler = SyncReconciler(storage, remote)
        app.state.reconciler = reconciler
        logger.info(f"Remote sync enabled against {url}")

        interval = get_auto_sync_seconds()
        if interval > 0:
            await reconciler.start_auto_sync(interval)
    else:
        logger.info("Remote sync disabled, SUPABASE_URL or SUPABASE_KEY not set")

    yield

    # Shutdown
    logger.info("Shutting down Pine application...")
    if app.state.reconciler is not None:
        await app.state.reconciler.stop_auto_sync()
    if remote is not None:
        await remote.close()


# Create FastAPI app
app = FastAPI(
    title="Pine",
    description="Time-value ledger: log half-hour slots, see what your time is worth",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(activities_router)
app.include_router(slots_router)
app.include_router(stats_router)
app.include_router(sync_router)
app.include_router(export_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Pine"}


def main():
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
