"""
Daily CRM sync job runners.

Used by the worker when the sync should run outside the API process, for
example from a cron-scheduled container. Unlike the API startup hook these
wait for the cascade to finish and raise SyncJobFailedError when it did not
succeed, so the worker process exits non-zero.
"""

import asyncio

from staffops.db.pool import worker_db_pool
from staffops.features.sync.domain.models import DailySyncDecision
from staffops.features.sync.services.daily_sync_service import daily_sync_service
from staffops.infrastructure.observability.logging import get_logger, log_job_summary

logger = get_logger(__name__)


class SyncJobFailedError(RuntimeError):
    """The CRM sync or the match recalculation did not complete cleanly."""


async def run_daily_sync_job() -> None:
    """Run today's sync cascade if it has not completed yet."""
    async with worker_db_pool():
        decision = await daily_sync_service.run_on_startup()
        if decision != DailySyncDecision.SYNC_STARTED:
            logger.info("Daily sync job has nothing to do", decision=decision.value)
            return

        report = await daily_sync_service.wait_for_background()

    if report is None:
        raise SyncJobFailedError("CRM sync cascade failed; see crm_sync job summary")
    if report.failed:
        raise SyncJobFailedError(
            f"Match recalculation failed for vacancies {report.failed_vacancy_ids}"
        )


async def run_match_recalculation_job() -> None:
    """Recompute match scores for all open vacancies without syncing first."""
    async with worker_db_pool():
        report = await daily_sync_service.recalculate_match_scores()

    log_job_summary(
        "match_recalculation",
        report.failed == 0,
        vacancies_processed=report.processed,
        vacancies_failed=report.failed,
        failed_vacancy_ids=report.failed_vacancy_ids,
    )
    if report.failed:
        raise SyncJobFailedError(
            f"Match recalculation failed for vacancies {report.failed_vacancy_ids}"
        )


if __name__ == "__main__":
    asyncio.run(run_daily_sync_job())
