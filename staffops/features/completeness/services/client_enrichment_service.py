"""
Client enrichment helpers: profile completeness notifications and logo lookup.

Notifications live in a bounded, most-recent-first log owned by the service
instance. Logo lookup probes a list of candidate URLs with short per-request
timeouts so one slow host cannot stall the lookup.
"""

import re
import uuid
from collections import deque
from datetime import UTC, datetime

import httpx

from staffops.config import settings
from staffops.features.completeness.domain.models import (
    CLIENT_PROFILE_FIELDS,
    Client,
    ClientNotification,
    find_missing_fields,
    follow_up_priority,
)
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

LOGO_PATHS = (
    "logo.png",
    "logo.svg",
    "assets/logo.png",
    "assets/images/logo.png",
    "static/logo.png",
    "images/logo.png",
)


class ClientNotificationLog:
    """Size-capped notification log, newest first."""

    def __init__(self, max_size: int = 100):
        self._items: deque[ClientNotification] = deque(maxlen=max_size)

    def add(
        self,
        notification_type: str,
        client_id: int,
        client_name: str,
        message: str,
        priority: str,
    ) -> ClientNotification:
        notification = ClientNotification(
            id=f"notif_{uuid.uuid4().hex[:12]}",
            type=notification_type,
            client_id=client_id,
            client_name=client_name,
            message=message,
            priority=priority,
            created_at=datetime.now(UTC),
        )
        # appendleft on a full deque drops the oldest entry from the right
        self._items.appendleft(notification)
        return notification

    def entries(self, resolved: bool = False) -> list[ClientNotification]:
        return [n for n in self._items if n.resolved == resolved]

    def resolve(self, notification_id: str) -> bool:
        for notification in self._items:
            if notification.id == notification_id:
                notification.resolved = True
                return True
        return False

    def __len__(self) -> int:
        return len(self._items)


def website_domain(website: str) -> str:
    domain = re.sub(r"^https?://", "", website.strip(), flags=re.IGNORECASE)
    domain = re.sub(r"^www\.", "", domain, flags=re.IGNORECASE)
    return domain.split("/")[0]


def candidate_logo_urls(website: str | None) -> list[str]:
    if not website or not website.strip():
        return []

    domain = website_domain(website)
    urls = [f"https://{domain}/{path}" for path in LOGO_PATHS]
    urls += [
        f"https://www.{domain}/logo.png",
        f"https://www.{domain}/logo.svg",
        f"https://{domain}/favicon.ico",
        f"https://www.{domain}/favicon.ico",
        f"https://www.google.com/s2/favicons?domain={domain}&sz=128",
        f"https://logo.clearbit.com/{domain}",
    ]
    return urls


class ClientEnrichmentService:
    def __init__(self, notifications: ClientNotificationLog | None = None, transport=None):
        self.notifications = notifications or ClientNotificationLog(settings.NOTIFICATION_LOG_SIZE)
        self._transport = transport

    def check_client_data_completeness(self, client: Client) -> ClientNotification | None:
        missing = find_missing_fields(client.as_fields(), CLIENT_PROFILE_FIELDS)
        if not missing:
            return None

        return self.notifications.add(
            notification_type="missing_info",
            client_id=client.id,
            client_name=client.name,
            message=(
                f"{client.name} is missing: {', '.join(missing)}. "
                "Please update client information."
            ),
            priority=follow_up_priority(len(missing)),
        )

    async def find_company_logo(self, client: Client) -> str | None:
        """First candidate URL that answers a HEAD request with an image."""
        urls = candidate_logo_urls(client.website)

        async with httpx.AsyncClient(
            timeout=settings.LOGO_PROBE_TIMEOUT,
            follow_redirects=True,
            transport=self._transport,
        ) as http:
            for url in urls:
                try:
                    response = await http.head(url)
                except httpx.HTTPError as e:
                    logger.debug("Logo probe failed", url=url, error=str(e))
                    continue

                content_type = response.headers.get("content-type", "")
                if response.is_success and content_type.startswith("image/"):
                    logger.info("Found client logo", client_id=client.id, url=url)
                    return url

        logger.info("No logo found for client", client_id=client.id, probed=len(urls))
        self.notifications.add(
            notification_type="logo_missing",
            client_id=client.id,
            client_name=client.name,
            message=f"No logo found for {client.name}. Please upload one manually.",
            priority="low",
        )
        return None


client_enrichment_service = ClientEnrichmentService()
