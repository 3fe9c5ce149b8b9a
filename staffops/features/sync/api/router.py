"""
Daily sync routes.

Triggering never waits for the sync: the cascade runs in the background
and its progress is visible through the status endpoint and the logs.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, status

from staffops.config import settings
from staffops.features.sync.services.daily_sync_service import (
    completed_since_midnight,
    daily_sync_service,
)
from staffops.infrastructure.observability.logging import get_logger
from staffops.models.api.sync_response import (
    RecomputeReportResponse,
    SyncStatusResponse,
    SyncTriggerResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status():
    """Last completed sync and the state of this process's cascade."""
    synced_today = None
    last_completed_at = None
    try:
        last_run = await daily_sync_service.sync_runs.fetch_latest_completed()
        synced_today = completed_since_midnight(last_run, datetime.now(settings.tzinfo()))
        last_completed_at = last_run.completed_at if last_run else None
    except Exception as e:
        logger.warning("Could not read last CRM sync", error=str(e))

    report = daily_sync_service.last_report
    return SyncStatusResponse(
        running=daily_sync_service.is_running,
        synced_today=synced_today,
        last_completed_at=last_completed_at,
        last_trigger=daily_sync_service.last_trigger,
        last_report=(
            RecomputeReportResponse(
                processed=report.processed,
                failed=report.failed,
                failed_vacancy_ids=report.failed_vacancy_ids,
            )
            if report
            else None
        ),
    )


@router.post("/run", response_model=SyncTriggerResponse, status_code=status.HTTP_202_ACCEPTED)
async def run_sync():
    """Start a full sync now, unless one is already running in this process."""
    try:
        decision = await daily_sync_service.trigger_manual_sync()
    except Exception as e:
        logger.error("Error starting manual CRM sync", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start sync",
        )

    return SyncTriggerResponse(decision=decision.value, running=daily_sync_service.is_running)
