"""
Domain models for the daily CRM synchronization.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SyncRunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class SyncRun:
    """Represents a sync_metadata row written by the CRM sync service."""

    id: int
    sync_type: str
    status: SyncRunStatus
    started_at: datetime
    completed_at: datetime | None


class DailySyncDecision(str, Enum):
    """What a startup check decided to do."""

    ALREADY_SYNCED = "already_synced"
    SYNC_STARTED = "sync_started"
    ALREADY_RUNNING = "already_running"
    STATUS_UNKNOWN = "status_unknown"


@dataclass(slots=True)
class OpenVacancy:
    id: int
    title: str


@dataclass(slots=True)
class RecomputeReport:
    processed: int = 0
    failed: int = 0
    failed_vacancy_ids: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.failed
