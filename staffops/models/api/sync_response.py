# staffops/models/api/sync_response.py
"""
Daily sync API response models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RecomputeReportResponse(BaseModel):
    processed: int = Field(..., description="Vacancies whose match scores were recomputed")
    failed: int = Field(..., description="Vacancies whose recomputation failed")
    failed_vacancy_ids: list[int] = Field(default_factory=list)


class SyncStatusResponse(BaseModel):
    """Current daily sync state as seen by this process."""

    running: bool = Field(..., description="Whether a sync cascade is running in this process")
    synced_today: bool | None = Field(
        None, description="Whether a sync completed since local midnight, null if unknown"
    )
    last_completed_at: datetime | None = Field(None, description="Most recent completed sync")
    last_trigger: str | None = Field(None, description="What started the last cascade here")
    last_report: RecomputeReportResponse | None = Field(
        None, description="Outcome of the last match recomputation in this process"
    )


class SyncTriggerResponse(BaseModel):
    decision: str = Field(..., description="What the trigger decided to do")
    running: bool = Field(..., description="Whether a sync cascade is now running")
