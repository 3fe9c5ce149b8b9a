"""
Repository helpers for dashboard reads.

Read-only raw SQL over candidates, vacancies, interactions, placements,
candidate_vacancy_links and tasks. Every time-bounded query takes explicit
bounds so callers control the instant being reported on.
"""

from dataclasses import dataclass
from datetime import datetime

from staffops.db.helpers import fetch_all, fetch_one, fetch_val
from staffops.features.dashboard.domain.models import (
    MetricWindow,
    PipelineLinkSnapshot,
    VacancySnapshot,
)
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

INTERVIEW_STAGE = "Interviews"
OFFER_STAGE = "Contracting"

# Window-bounded counts: each query takes (start, end) for [start, end)
WINDOW_COUNT_QUERIES: dict[str, str] = {
    "total_vacancies": """
        SELECT COUNT(*) FROM vacancies
        WHERE created_at >= %s AND created_at < %s
    """,
    "new_candidates": """
        SELECT COUNT(*) FROM candidates
        WHERE created_at >= %s AND created_at < %s
    """,
    "calls_made": """
        SELECT COUNT(*) FROM interactions
        WHERE type = 'phone' AND created_at >= %s AND created_at < %s
    """,
    "interviews_scheduled": f"""
        SELECT COUNT(*) FROM candidate_vacancy_links
        WHERE stage = '{INTERVIEW_STAGE}' AND updated_at >= %s AND updated_at < %s
    """,
    "offers_sent": f"""
        SELECT COUNT(*) FROM candidate_vacancy_links
        WHERE stage = '{OFFER_STAGE}' AND updated_at >= %s AND updated_at < %s
    """,
    "placements": """
        SELECT COUNT(*) FROM placements
        WHERE created_at >= %s AND created_at < %s
    """,
}


@dataclass(slots=True)
class TaskRow:
    id: int
    title: str
    type: str
    priority: str
    status: str
    due_at: datetime
    related_type: str | None
    related_id: int | None
    candidate_id: int | None
    vacancy_id: int | None
    client_id: int | None
    estimated_duration: int | None


@dataclass(slots=True)
class InteractionRow:
    type: str
    outcome: str | None
    subject: str | None
    created_at: datetime


@dataclass(slots=True)
class ClientContactRow:
    id: int
    name: str
    created_at: datetime
    last_contact_at: datetime | None


def _task_from_row(row: dict) -> TaskRow:
    return TaskRow(
        id=row["id"],
        title=row["title"],
        type=row["type"],
        priority=row["priority"],
        status=row["status"],
        due_at=row["due_at"],
        related_type=row.get("related_type"),
        related_id=row.get("related_id"),
        candidate_id=row.get("candidate_id"),
        vacancy_id=row.get("vacancy_id"),
        client_id=row.get("client_id"),
        estimated_duration=row.get("estimated_duration"),
    )


_TASK_COLUMNS = """
    id, title, type, priority, status, due_at, related_type, related_id,
    candidate_id, vacancy_id, client_id, estimated_duration
"""


class DashboardRepository:
    """Raw SQL reads backing the dashboard services."""

    @classmethod
    async def count_in_window(cls, metric: str, window: MetricWindow) -> int:
        query = WINDOW_COUNT_QUERIES.get(metric)
        if query is None:
            raise ValueError(f"Unknown window metric '{metric}'")
        return int(await fetch_val(query, (window.start, window.end)) or 0)

    @classmethod
    async def count_candidates_before(cls, end: datetime) -> int:
        value = await fetch_val("SELECT COUNT(*) FROM candidates WHERE created_at < %s", (end,))
        return int(value or 0)

    @classmethod
    async def fetch_pending_tasks(
        cls, owner_id: int, due_from: datetime, due_until: datetime
    ) -> list[TaskRow]:
        query = f"""
            SELECT {_TASK_COLUMNS}
            FROM tasks
            WHERE owner_id = %s
              AND status = 'pending'
              AND due_at >= %s
              AND due_at <= %s
            ORDER BY due_at ASC, id ASC
        """
        rows = await fetch_all(query, (owner_id, due_from, due_until))
        return [_task_from_row(row) for row in rows]

    @classmethod
    async def fetch_call_tasks(
        cls, owner_id: int, due_from: datetime, due_until: datetime
    ) -> list[TaskRow]:
        query = f"""
            SELECT {_TASK_COLUMNS}
            FROM tasks
            WHERE owner_id = %s
              AND type = 'call'
              AND due_at >= %s
              AND due_at < %s
            ORDER BY due_at ASC, id ASC
        """
        rows = await fetch_all(query, (owner_id, due_from, due_until))
        return [_task_from_row(row) for row in rows]

    @classmethod
    async def sum_placement_margins(cls, since: datetime, until: datetime) -> float:
        value = await fetch_val(
            """
            SELECT COALESCE(SUM(margin), 0) FROM placements
            WHERE created_at >= %s AND created_at < %s
            """,
            (since, until),
        )
        return float(value or 0)

    @classmethod
    async def fetch_open_vacancies_without_candidates(cls) -> list[VacancySnapshot]:
        rows = await fetch_all(
            """
            SELECT v.id, v.title, v.status, COUNT(l.id) AS linked_candidates
            FROM vacancies v
            LEFT JOIN candidate_vacancy_links l ON l.vacancy_id = v.id
            WHERE v.status = 'open'
            GROUP BY v.id, v.title, v.status
            HAVING COUNT(l.id) = 0
            ORDER BY v.id
            """
        )
        return [
            VacancySnapshot(
                id=row["id"],
                title=row["title"],
                status=row["status"],
                linked_candidates=int(row["linked_candidates"]),
            )
            for row in rows
        ]

    @classmethod
    async def fetch_links_inactive_since(cls, cutoff: datetime) -> list[PipelineLinkSnapshot]:
        rows = await fetch_all(
            """
            SELECT id, vacancy_id, candidate_id, stage, last_activity_at
            FROM candidate_vacancy_links
            WHERE last_activity_at < %s
            ORDER BY id
            """,
            (cutoff,),
        )
        return [
            PipelineLinkSnapshot(
                id=row["id"],
                vacancy_id=row["vacancy_id"],
                candidate_id=row["candidate_id"],
                stage=row["stage"],
                last_activity_at=row["last_activity_at"],
            )
            for row in rows
        ]

    @classmethod
    async def fetch_user_interactions(
        cls, user_id: int, since: datetime, until: datetime
    ) -> list[InteractionRow]:
        rows = await fetch_all(
            """
            SELECT type, outcome, subject, created_at
            FROM interactions
            WHERE user_id = %s AND created_at >= %s AND created_at < %s
            """,
            (user_id, since, until),
        )
        return [
            InteractionRow(
                type=row["type"],
                outcome=row.get("outcome"),
                subject=row.get("subject"),
                created_at=row["created_at"],
            )
            for row in rows
        ]

    @classmethod
    async def fetch_active_clients_with_last_contact(cls) -> list[ClientContactRow]:
        rows = await fetch_all(
            """
            SELECT c.id, c.name, c.created_at, MAX(i.created_at) AS last_contact_at
            FROM clients c
            LEFT JOIN interactions i ON i.client_id = c.id
            WHERE c.status = 'active'
            GROUP BY c.id, c.name, c.created_at
            """
        )
        return [
            ClientContactRow(
                id=row["id"],
                name=row["name"],
                created_at=row["created_at"],
                last_contact_at=row.get("last_contact_at"),
            )
            for row in rows
        ]

    @classmethod
    async def fetch_pipeline_load(cls) -> dict[str, int]:
        row = await fetch_one(
            f"""
            SELECT
                COUNT(DISTINCT v.id) AS live_vacancies,
                COUNT(l.id) AS total_candidates_matched,
                COUNT(l.id) FILTER (WHERE l.stage = '{INTERVIEW_STAGE}') AS interviews_pipeline,
                COUNT(l.id) FILTER (WHERE l.stage = '{OFFER_STAGE}') AS offers_and_start_dates
            FROM vacancies v
            LEFT JOIN candidate_vacancy_links l ON l.vacancy_id = v.id
            WHERE v.status = 'open'
            """
        )
        row = row or {}
        return {
            "live_vacancies": int(row.get("live_vacancies") or 0),
            "total_candidates_matched": int(row.get("total_candidates_matched") or 0),
            "interviews_pipeline": int(row.get("interviews_pipeline") or 0),
            "offers_and_start_dates": int(row.get("offers_and_start_dates") or 0),
        }
