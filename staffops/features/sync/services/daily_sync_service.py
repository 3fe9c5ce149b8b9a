"""
Once-per-day CRM synchronization with cascading recomputation.

On process startup the service checks whether a full CRM sync already
completed since local midnight. If not, it starts the sync in a background
task and, only after the sync succeeds, runs the completeness scan and then
recomputes match scores for every open vacancy, one vacancy at a time.

When the last-sync lookup itself fails nothing is started: an unknown state
could mean a sync already ran or is running elsewhere.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from staffops.config import settings
from staffops.features.completeness.services.watchdog_service import completeness_watchdog
from staffops.features.dashboard.domain.timeframes import start_of_day
from staffops.features.sync.clients import (
    CrmSyncClient,
    HttpCrmSyncClient,
    HttpMatchScorer,
    MatchScorer,
)
from staffops.features.sync.domain.models import DailySyncDecision, RecomputeReport, SyncRun
from staffops.features.sync.repository import SyncRunRepository, VacancyRepository
from staffops.infrastructure.observability.logging import get_logger, log_job_summary

logger = get_logger(__name__)


def completed_since_midnight(last_run: SyncRun | None, now: datetime) -> bool:
    """True when the run completed on or after local midnight of now's day."""
    if last_run is None or last_run.completed_at is None:
        return False

    completed_at = last_run.completed_at
    if completed_at.tzinfo is None:
        # sync_metadata stores naive UTC timestamps
        completed_at = completed_at.replace(tzinfo=UTC)

    return completed_at >= start_of_day(now)


class DailySyncService:
    def __init__(
        self,
        crm_client: CrmSyncClient | None = None,
        match_scorer: MatchScorer | None = None,
        sync_runs=SyncRunRepository,
        vacancies=VacancyRepository,
        completeness_watchdog=None,
    ):
        self.crm_client = crm_client or HttpCrmSyncClient()
        self.match_scorer = match_scorer or HttpMatchScorer()
        self.sync_runs = sync_runs
        self.vacancies = vacancies
        self.completeness_watchdog = completeness_watchdog
        self.last_report: RecomputeReport | None = None
        self.last_trigger: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_on_startup(self, now: datetime | None = None) -> DailySyncDecision:
        """Start today's sync unless it already completed. Never blocks on the sync."""
        if self.is_running:
            logger.info("CRM sync cascade already running in this process")
            return DailySyncDecision.ALREADY_RUNNING

        now = now or datetime.now(settings.tzinfo())

        try:
            last_run = await self.sync_runs.fetch_latest_completed()
        except Exception as e:
            logger.warning(
                "Could not determine last CRM sync; not starting a sync",
                error=str(e),
                error_type=type(e).__name__,
            )
            return DailySyncDecision.STATUS_UNKNOWN

        if completed_since_midnight(last_run, now):
            logger.info(
                "CRM sync already completed today",
                completed_at=last_run.completed_at.isoformat(),
                sync_run_id=last_run.id,
            )
            return DailySyncDecision.ALREADY_SYNCED

        # a manual trigger may have started a cascade during the lookup
        if self.is_running:
            return DailySyncDecision.ALREADY_RUNNING

        logger.info("First start of the day, running daily CRM sync", date=now.date().isoformat())
        self._spawn("daily_startup")
        return DailySyncDecision.SYNC_STARTED

    async def trigger_manual_sync(self) -> DailySyncDecision:
        """Start a sync regardless of today's state, unless one is running here."""
        if self.is_running:
            return DailySyncDecision.ALREADY_RUNNING

        logger.info("Manual CRM sync requested")
        self._spawn("manual")
        return DailySyncDecision.SYNC_STARTED

    async def wait_for_background(self) -> RecomputeReport | None:
        """Await the running cascade, if any."""
        if self._task is None:
            return None
        return await self._task

    async def shutdown(self) -> None:
        if not self.is_running:
            return

        logger.warning("Cancelling CRM sync cascade on shutdown; next startup will retry")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def _spawn(self, trigger: str) -> None:
        self.last_trigger = trigger
        self._task = asyncio.create_task(self._run_cascade(trigger), name=f"crm-sync-{trigger}")
        self._task.add_done_callback(self._on_cascade_done)

    def _on_cascade_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("CRM sync cascade cancelled", task=task.get_name())
            return

        error = task.exception()
        if error is not None:
            logger.error(
                "CRM sync cascade crashed",
                task=task.get_name(),
                error=str(error),
                error_type=type(error).__name__,
            )

    async def _run_cascade(self, trigger: str) -> RecomputeReport | None:
        try:
            await self.crm_client.run_full_sync()
        except Exception as e:
            log_job_summary("crm_sync", False, trigger=trigger, error=str(e))
            return None

        logger.info("CRM sync completed, starting dependent recomputation", trigger=trigger)

        await self._run_completeness_scan()

        try:
            report = await self.recalculate_match_scores()
        except Exception as e:
            log_job_summary("match_recalculation", False, trigger=trigger, error=str(e))
            return None

        self.last_report = report
        log_job_summary(
            "crm_sync",
            True,
            trigger=trigger,
            vacancies_processed=report.processed,
            vacancies_failed=report.failed,
        )
        return report

    async def _run_completeness_scan(self) -> None:
        if self.completeness_watchdog is None:
            return

        try:
            result = await self.completeness_watchdog.check_all_clients_for_missing_contact_persons()
            logger.info(
                "Post-sync completeness scan finished",
                total_clients=result.total_clients,
                todos_created=result.todos_created,
            )
        except Exception as e:
            logger.error("Post-sync completeness scan failed", error=str(e))

    async def recalculate_match_scores(self) -> RecomputeReport:
        """Recompute cached match scores for each open vacancy, sequentially."""
        open_vacancies = await self.vacancies.fetch_open_vacancies()
        logger.info("Recalculating match scores", open_vacancies=len(open_vacancies))

        report = RecomputeReport()
        for position, vacancy in enumerate(open_vacancies, start=1):
            try:
                await self.match_scorer.match_candidates_to_vacancy(vacancy.id)
            except Exception as e:
                report.failed += 1
                report.failed_vacancy_ids.append(vacancy.id)
                logger.error(
                    "Match recalculation failed for vacancy",
                    vacancy_id=vacancy.id,
                    error=str(e),
                )
                continue

            report.processed += 1
            logger.debug(
                "Match recalculation done for vacancy",
                vacancy_id=vacancy.id,
                progress=f"{position}/{len(open_vacancies)}",
            )

        return report


daily_sync_service = DailySyncService(completeness_watchdog=completeness_watchdog)
