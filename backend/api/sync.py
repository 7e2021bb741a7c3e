"""Remote sync endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Request
from backend.models.stats import ConnectionStatus, PullResult, PushResult, SyncStatus
from backend.services import SyncReconciler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["sync"])


def get_reconciler(request: Request) -> SyncReconciler:
    """Helper to get the reconciler, which only exists when a remote store is configured."""
    reconciler = getattr(request.app.state, "reconciler", None)
    if reconciler is None:
        raise HTTPException(status_code=503, detail="Remote store is not configured")
    return reconciler


@router.post("/push")
async def push(request: Request) -> PushResult:
    """Upload every local log and daily summary to the remote store."""
    result = await get_reconciler(request).push()
    logger.info(f"Push finished: {result.synced} synced, {len(result.errors)} errors")
    return result


@router.post("/pull")
async def pull(request: Request) -> PullResult:
    """Merge this device's remote logs that are missing locally."""
    return await get_reconciler(request).pull_and_merge()


@router.get("/status")
async def status(request: Request) -> SyncStatus:
    return await get_reconciler(request).get_status()


@router.get("/test")
async def test_connection(request: Request) -> ConnectionStatus:
    return await get_reconciler(request).test_connection()
