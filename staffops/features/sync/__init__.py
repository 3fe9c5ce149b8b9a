"""
Daily CRM sync feature package.

Once-per-day sync on startup and the recomputation cascade that follows it.
"""

from .domain.models import DailySyncDecision, RecomputeReport, SyncRun  # noqa: F401
from .services.daily_sync_service import DailySyncService, daily_sync_service  # noqa: F401
