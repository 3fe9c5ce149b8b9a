"""
Operational alerts derived from live pipeline state.

Alert ids are derived from the subject and the rule, so running the scan
again yields the same ids and consumers can track read state.
"""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timedelta

from staffops.features.dashboard.domain.models import Alert, PipelineLinkSnapshot, VacancySnapshot
from staffops.features.dashboard.repository import DashboardRepository
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

STALLED_AFTER = timedelta(days=7)
STALLED_PIPELINE_ALERT_ID = "stalled-pipeline"


def zero_candidate_vacancy_alerts(vacancies: Iterable[VacancySnapshot]) -> list[Alert]:
    return [
        Alert(
            id=f"vacancy-no-candidates-{vacancy.id}",
            kind="warning",
            title="Vacancy without candidates",
            description=f"{vacancy.title} has no linked candidates",
            priority="high",
            action_url=f"/vacancies/{vacancy.id}",
            related_type="vacancy",
            related_id=vacancy.id,
        )
        for vacancy in vacancies
        if vacancy.status == "open" and vacancy.linked_candidates == 0
    ]


def stalled_pipeline_alert(
    links: Iterable[PipelineLinkSnapshot], now: datetime
) -> Alert | None:
    """One aggregate alert for every link idle for more than a week."""
    cutoff = now - STALLED_AFTER
    stalled = sum(
        1 for link in links if link.last_activity_at is not None and link.last_activity_at < cutoff
    )
    if stalled == 0:
        return None

    return Alert(
        id=STALLED_PIPELINE_ALERT_ID,
        kind="warning",
        title="Stalled pipeline stages",
        description=f"{stalled} candidates haven't had activity in 7+ days",
        priority="medium",
    )


def derive_alerts(
    vacancies: Iterable[VacancySnapshot],
    links: Iterable[PipelineLinkSnapshot],
    now: datetime,
) -> list[Alert]:
    alerts = zero_candidate_vacancy_alerts(vacancies)
    stalled = stalled_pipeline_alert(links, now)
    if stalled:
        alerts.append(stalled)
    return alerts


class AlertService:
    def __init__(self, repository=DashboardRepository):
        self.repository = repository

    async def get_alerts(self, now: datetime) -> list[Alert]:
        vacancies, links = await asyncio.gather(
            self.repository.fetch_open_vacancies_without_candidates(),
            self.repository.fetch_links_inactive_since(now - STALLED_AFTER),
        )
        alerts = derive_alerts(vacancies, links, now)
        logger.debug("Alerts derived", alert_count=len(alerts))
        return alerts


alert_service = AlertService()
