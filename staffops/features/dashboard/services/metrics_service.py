"""
Time-window pipeline metrics.

Counts domain events inside a window and in the immediately preceding window
of the same length, and reports the difference. Deltas can be negative and
are never clamped.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from staffops.features.dashboard.domain.models import (
    MetricDeltas,
    MetricWindow,
    PipelineMetrics,
    PipelineSummary,
)
from staffops.features.dashboard.domain.timeframes import (
    start_of_day,
    start_of_month,
    start_of_week,
)
from staffops.features.dashboard.repository import DashboardRepository
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Metrics compared against the previous window
COMPARED_METRICS = (
    "new_candidates",
    "calls_made",
    "interviews_scheduled",
    "offers_sent",
    "placements",
)


class PipelineMetricsService:
    def __init__(self, repository=DashboardRepository):
        self.repository = repository

    async def get_pipeline_metrics(self, window: MetricWindow) -> PipelineMetrics:
        previous = window.previous()

        current_names = ("total_vacancies", *COMPARED_METRICS)
        results = await asyncio.gather(
            self.repository.count_candidates_before(window.end),
            *(self.repository.count_in_window(name, window) for name in current_names),
            *(self.repository.count_in_window(name, previous) for name in COMPARED_METRICS),
        )

        total_candidates = results[0]
        current = dict(zip(current_names, results[1 : 1 + len(current_names)]))
        prior = dict(zip(COMPARED_METRICS, results[1 + len(current_names) :]))

        deltas = MetricDeltas(
            # No prior snapshot of the running total exists, so its delta is 0
            total_candidates=0,
            **{name: current[name] - prior[name] for name in COMPARED_METRICS},
        )

        return PipelineMetrics(
            total_candidates=total_candidates,
            total_vacancies=current["total_vacancies"],
            new_candidates=current["new_candidates"],
            calls_made=current["calls_made"],
            interviews_scheduled=current["interviews_scheduled"],
            offers_sent=current["offers_sent"],
            placements=current["placements"],
            change_vs_previous=deltas,
        )

    async def get_pipeline_summary(self, now: datetime) -> PipelineSummary:
        """Today, this week and this month, all ending at the same instant."""
        today, week, month = await asyncio.gather(
            self.get_pipeline_metrics(MetricWindow(start_of_day(now), now)),
            self.get_pipeline_metrics(MetricWindow(start_of_week(now), now)),
            self.get_pipeline_metrics(MetricWindow(start_of_month(now), now)),
        )
        logger.debug(
            "Pipeline summary computed",
            now=now.isoformat(),
            new_candidates_month=month.new_candidates,
        )
        return PipelineSummary(today=today, week=week, month=month)


pipeline_metrics_service = PipelineMetricsService()
