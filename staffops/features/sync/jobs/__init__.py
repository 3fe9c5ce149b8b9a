"""
Job runners for the daily sync feature.
"""

from .daily_sync_job import SyncJobFailedError, run_daily_sync_job, run_match_recalculation_job

__all__ = ["SyncJobFailedError", "run_daily_sync_job", "run_match_recalculation_job"]
