"""
Inventory sync endpoints.

Report the latest sync run and trigger a manual sync.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.api.schemas import ERROR_RESPONSES, CamelModel
from cardsurfer.db.database import get_session
from cardsurfer.db.operations import get_inventory_stats, get_latest_sync_run
from cardsurfer.jobs.sync_inventory import get_syncer, run_sync_guarded
from cardsurfer.services.inventory_sync import InventorySyncer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"], responses=ERROR_RESPONSES)


class SyncRunResponse(CamelModel):
    """A sync_log row."""

    id: int
    started_at: datetime | None = None
    finished_at: datetime | None = None
    products_synced: int
    variants_synced: int
    status: str
    error_message: str | None = None


class InventoryResponse(CamelModel):
    """Totals over in-stock variants."""

    product_count: int
    variant_count: int
    total_stock: int


class SyncStatusResponse(CamelModel):
    """Latest sync run, or status=never_synced if none has run."""

    status: str | None = None
    last_sync: SyncRunResponse | None = None
    inventory: InventoryResponse | None = None


class TriggerResponse(CamelModel):
    message: str


@router.get("/status", response_model=SyncStatusResponse, response_model_exclude_none=True)
async def sync_status(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SyncStatusResponse:
    """Status of the most recent inventory sync plus current stock totals."""
    run = await get_latest_sync_run(session)
    if run is None:
        return SyncStatusResponse(status="never_synced")

    stats = await get_inventory_stats(session)
    return SyncStatusResponse(
        last_sync=SyncRunResponse(
            id=run.id,
            started_at=run.started_at,
            finished_at=run.finished_at,
            products_synced=run.products_synced,
            variants_synced=run.variants_synced,
            status=run.status,
            error_message=run.error_message,
        ),
        inventory=InventoryResponse(
            product_count=stats.product_count,
            variant_count=stats.variant_count,
            total_stock=stats.total_stock,
        ),
    )


@router.post("/trigger", response_model=TriggerResponse)
async def trigger_sync(
    background_tasks: BackgroundTasks,
    syncer: Annotated[InventorySyncer, Depends(get_syncer)],
) -> TriggerResponse:
    """
    Start an inventory sync in the background.

    Responds immediately; poll /sync/status for the outcome.
    """
    if syncer.is_running:
        return TriggerResponse(message="Sync already in progress")

    background_tasks.add_task(run_sync_guarded, syncer, "manual")
    logger.info("Manual sync triggered")
    return TriggerResponse(message="Sync started")
