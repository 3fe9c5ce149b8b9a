"""
Clients for the external collaborators of the daily sync.

The CRM sync service performs the full synchronization and records a
sync_metadata row; the matcher service recomputes and caches candidate
match scores for one vacancy. Both are opaque and may be slow.
"""

from typing import Protocol

import httpx

from staffops.config import settings
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CrmSyncError(Exception):
    """Raised when a full CRM sync could not be completed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MatchScoringError(Exception):
    """Raised when match scores for a vacancy could not be recomputed."""

    def __init__(self, message: str, vacancy_id: int):
        super().__init__(message)
        self.vacancy_id = vacancy_id


class CrmSyncClient(Protocol):
    async def run_full_sync(self) -> None: ...


class MatchScorer(Protocol):
    async def match_candidates_to_vacancy(self, vacancy_id: int) -> None: ...


class HttpCrmSyncClient:
    """Triggers a blocking full sync on the CRM sync service."""

    def __init__(
        self, base_url: str | None = None, timeout: float | None = None, transport=None
    ):
        self.base_url = (base_url or settings.CRM_SYNC_URL).rstrip("/")
        self.timeout = timeout or settings.CRM_SYNC_TIMEOUT
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if settings.CRM_SYNC_TOKEN:
            return {"Authorization": f"Bearer {settings.CRM_SYNC_TOKEN}"}
        return {}

    async def run_full_sync(self) -> None:
        url = f"{self.base_url}/sync/full"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=self._headers())
        except httpx.RequestError as e:
            raise CrmSyncError(f"CRM sync request failed: {e}") from e

        if response.status_code >= 400:
            raise CrmSyncError(
                f"CRM sync returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info("CRM full sync finished", status_code=response.status_code)


class HttpMatchScorer:
    """Asks the matcher service to recompute and cache one vacancy's scores."""

    def __init__(
        self, base_url: str | None = None, timeout: float | None = None, transport=None
    ):
        self.base_url = (base_url or settings.MATCHER_URL).rstrip("/")
        self.timeout = timeout or settings.MATCHER_TIMEOUT
        self._transport = transport

    async def match_candidates_to_vacancy(self, vacancy_id: int) -> None:
        url = f"{self.base_url}/vacancies/{vacancy_id}/match"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url)
        except httpx.RequestError as e:
            raise MatchScoringError(f"Matcher request failed: {e}", vacancy_id) from e

        if response.status_code >= 400:
            raise MatchScoringError(
                f"Matcher returned HTTP {response.status_code}", vacancy_id
            )
