"""
Repository helpers for the daily sync.

sync_metadata is owned by the CRM sync service; this side only reads it.
"""

from staffops.db.helpers import fetch_all, fetch_one
from staffops.features.sync.domain.models import OpenVacancy, SyncRun, SyncRunStatus


class SyncRunRepository:
    @classmethod
    async def fetch_latest_completed(cls) -> SyncRun | None:
        row = await fetch_one(
            """
            SELECT id, sync_type, status, started_at, completed_at
            FROM sync_metadata
            WHERE status = 'completed' AND completed_at IS NOT NULL
            ORDER BY completed_at DESC
            LIMIT 1
            """
        )
        if not row:
            return None

        return SyncRun(
            id=row["id"],
            sync_type=row["sync_type"],
            status=SyncRunStatus(row["status"]),
            started_at=row["started_at"],
            completed_at=row["completed_at"],
        )


class VacancyRepository:
    @classmethod
    async def fetch_open_vacancies(cls) -> list[OpenVacancy]:
        rows = await fetch_all(
            "SELECT id, title FROM vacancies WHERE status = 'open' ORDER BY id"
        )
        return [OpenVacancy(id=row["id"], title=row["title"]) for row in rows]
