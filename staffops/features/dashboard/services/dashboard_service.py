"""
Dashboard composition.

Fans out every dashboard section concurrently and joins them into one
DashboardSummary. The clock is read once per request and the same instant
is passed to every section. Sections never see each other's results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from staffops.config import settings
from staffops.features.dashboard.domain.models import (
    ActivityCounts,
    ContactsDue,
    DailyProgress,
    DashboardSummary,
    DashboardTask,
    FieldManagerKpis,
    KpiMetrics,
    PipelineLoad,
    RecruiterKpis,
    RevenueData,
    RevenueRadar,
    SlaMetric,
    SlaMetrics,
    ViewerScope,
)
from staffops.features.dashboard.domain.timeframes import (
    start_of_day,
    start_of_month,
    start_of_quarter,
    start_of_week,
)
from staffops.features.dashboard.repository import DashboardRepository, InteractionRow, TaskRow
from staffops.features.dashboard.services.alert_service import AlertService
from staffops.features.dashboard.services.cadence_service import CadenceService
from staffops.features.dashboard.services.metrics_service import PipelineMetricsService
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

TASK_HORIZON = timedelta(hours=48)

# Naive forward projection and probability weighting of realized margin
MONTH_PROJECTION = 1.2
MONTH_PROBABILITY = 0.8
QUARTER_PROJECTION = 1.15
QUARTER_PROBABILITY = 0.85

# Targets until SLA tracking is wired to interaction timestamps
SLA_PLACEHOLDERS = SlaMetrics(
    time_to_first_contact=SlaMetric(average_hours=4.2, breaches=3, target_hours=4),
    time_to_shortlist=SlaMetric(average_hours=24, breaches=1, target_hours=24),
    time_to_client_submission=SlaMetric(average_hours=48, breaches=2, target_hours=48),
    time_to_interview=SlaMetric(average_hours=72, breaches=1, target_hours=72),
)


def to_dashboard_task(task: TaskRow, now: datetime) -> DashboardTask:
    return DashboardTask(
        id=task.id,
        title=task.title,
        type=task.type,
        priority=task.priority,
        due_at=task.due_at,
        is_overdue=now > task.due_at,
        related_type=task.related_type,
        related_id=task.related_id,
        candidate_id=task.candidate_id,
        vacancy_id=task.vacancy_id,
        client_id=task.client_id,
        estimated_duration=task.estimated_duration,
    )


def count_activity(interactions: list[InteractionRow]) -> ActivityCounts:
    return ActivityCounts(
        calls_made=sum(1 for i in interactions if i.type == "phone"),
        candidates_spoken=sum(1 for i in interactions if i.outcome == "connected"),
        intros_sent=sum(
            1 for i in interactions if i.type == "email" and "intro" in (i.subject or "").lower()
        ),
    )


class DashboardService:
    def __init__(
        self,
        repository=DashboardRepository,
        metrics_service: PipelineMetricsService | None = None,
        alert_service: AlertService | None = None,
        cadence_service: CadenceService | None = None,
    ):
        self.repository = repository
        self.metrics_service = metrics_service or PipelineMetricsService(repository)
        self.alert_service = alert_service or AlertService(repository)
        self.cadence_service = cadence_service or CadenceService(repository)

    async def get_dashboard_summary(
        self,
        viewer_id: int,
        scope: ViewerScope = ViewerScope.RECRUITER,
        now: datetime | None = None,
    ) -> DashboardSummary:
        now = now or datetime.now(settings.tzinfo())

        sections: dict[str, Callable[[], Awaitable]] = {
            "pipeline_summary": lambda: self.metrics_service.get_pipeline_summary(now),
            "work_blocks": lambda: self.get_daily_progress(viewer_id, now),
            "tasks": lambda: self.get_tasks(viewer_id, now),
            "revenue_radar": lambda: self.get_revenue_radar(now),
            "sla_metrics": self.get_sla_metrics,
            "alerts": lambda: self.alert_service.get_alerts(now),
            "kpis": lambda: self.get_kpi_metrics(viewer_id, scope, now),
        }

        results = await asyncio.gather(
            *(section() for section in sections.values()), return_exceptions=True
        )

        values: dict[str, object] = {}
        degraded: list[str] = []
        for name, result in zip(sections, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Dashboard section failed",
                    section=name,
                    viewer_id=viewer_id,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                values[name] = None
                degraded.append(name)
            else:
                values[name] = result

        if degraded:
            logger.warning("Returning degraded dashboard", viewer_id=viewer_id, sections=degraded)

        return DashboardSummary(
            generated_at=now,
            scope=scope,
            degraded_sections=degraded,
            **values,
        )

    async def get_tasks(self, viewer_id: int, now: datetime) -> list[DashboardTask]:
        """Pending tasks due between the start of today and the end of tomorrow."""
        day_start = start_of_day(now)
        rows = await self.repository.fetch_pending_tasks(
            viewer_id, day_start, day_start + TASK_HORIZON
        )
        return [to_dashboard_task(row, now) for row in rows]

    async def get_daily_progress(self, viewer_id: int, now: datetime) -> DailyProgress:
        day_start = start_of_day(now)
        rows = await self.repository.fetch_call_tasks(
            viewer_id, day_start, day_start + timedelta(days=1)
        )

        completed = [row for row in rows if row.status == "completed"]
        pending = [row for row in rows if row.status == "pending"]

        return DailyProgress(
            total_planned=len(rows),
            completed=len(completed),
            pending=len(pending),
            completion_rate=round(len(completed) / len(rows) * 100) if rows else 0,
            tasks=[to_dashboard_task(row, now) for row in pending],
        )

    async def get_revenue_radar(self, now: datetime) -> RevenueRadar:
        month_revenue, quarter_revenue = await asyncio.gather(
            self.repository.sum_placement_margins(start_of_month(now), now),
            self.repository.sum_placement_margins(start_of_quarter(now), now),
        )

        return RevenueRadar(
            current_month=RevenueData(
                total_expected=month_revenue * MONTH_PROJECTION,
                total_realized=month_revenue,
                currency=settings.CURRENCY,
                probability_weighted=month_revenue * MONTH_PROBABILITY,
            ),
            current_quarter=RevenueData(
                total_expected=quarter_revenue * QUARTER_PROJECTION,
                total_realized=quarter_revenue,
                currency=settings.CURRENCY,
                probability_weighted=quarter_revenue * QUARTER_PROBABILITY,
            ),
        )

    async def get_sla_metrics(self) -> SlaMetrics:
        return SLA_PLACEHOLDERS

    async def get_kpi_metrics(
        self, viewer_id: int, scope: ViewerScope, now: datetime
    ) -> KpiMetrics:
        if scope == ViewerScope.RECRUITER:
            week_start = start_of_week(now)
            day_start = start_of_day(now)
            interactions = await self.repository.fetch_user_interactions(viewer_id, week_start, now)
            today = [i for i in interactions if i.created_at >= day_start]
            return KpiMetrics(
                recruiter=RecruiterKpis(
                    today=count_activity(today),
                    week=count_activity(interactions),
                )
            )

        due_list, load = await asyncio.gather(
            self.cadence_service.get_cadence_due_list(ViewerScope.FIELD_MANAGER, now),
            self.repository.fetch_pipeline_load(),
        )
        overdue = sum(1 for item in due_list if item.is_overdue)
        return KpiMetrics(
            field_manager=FieldManagerKpis(
                contacts_due=ContactsDue(
                    overdue_clients=overdue,
                    due_soon_clients=len(due_list) - overdue,
                ),
                pipeline=PipelineLoad(**load),
            )
        )


dashboard_service = DashboardService()
