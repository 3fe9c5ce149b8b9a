"""
Contact cadence scheduling.

The required contact interval tightens the longer an entity goes without
contact: monthly by default, bi-weekly after two weeks of silence and
quarterly once the relationship has been dormant for three months.
"""

from datetime import datetime, timedelta

from staffops.features.dashboard.domain.models import CadenceItem, CadenceTier, ViewerScope
from staffops.features.dashboard.repository import DashboardRepository
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DUE_SOON_WINDOW = timedelta(days=7)


def select_cadence_tier(days_since_contact: int) -> CadenceTier:
    if days_since_contact > 90:
        return CadenceTier.QUARTERLY
    if days_since_contact > 14:
        return CadenceTier.BI_WEEKLY
    return CadenceTier.MONTHLY


def build_cadence_item(
    entity_type: str,
    entity_id: int,
    name: str,
    last_contact_at: datetime,
    today: datetime,
) -> CadenceItem:
    days_since_contact = (today - last_contact_at) // timedelta(days=1)
    tier = select_cadence_tier(days_since_contact)
    next_due_date = last_contact_at + timedelta(days=tier.days)

    return CadenceItem(
        entity_type=entity_type,
        entity_id=entity_id,
        name=name,
        last_contact_at=last_contact_at,
        cadence_type=tier.label,
        cadence_days=tier.days,
        next_due_date=next_due_date,
        is_overdue=today > next_due_date,
        days_since_contact=days_since_contact,
    )


def is_due(item: CadenceItem, today: datetime) -> bool:
    """Overdue, or due in strictly less than seven days."""
    return item.is_overdue or item.next_due_date - today < DUE_SOON_WINDOW


def sort_due_list(items: list[CadenceItem]) -> list[CadenceItem]:
    return sorted(items, key=lambda item: (item.next_due_date, item.entity_id))


class CadenceService:
    def __init__(self, repository=DashboardRepository):
        self.repository = repository

    async def get_cadence_due_list(self, role: ViewerScope, today: datetime) -> list[CadenceItem]:
        if role != ViewerScope.FIELD_MANAGER:
            # Recruiters have no cadence-tracked relationships
            return []

        clients = await self.repository.fetch_active_clients_with_last_contact()

        items = []
        for client in clients:
            item = build_cadence_item(
                entity_type="client",
                entity_id=client.id,
                name=client.name,
                last_contact_at=client.last_contact_at or client.created_at,
                today=today,
            )
            if is_due(item, today):
                items.append(item)

        logger.info(
            "Cadence due list computed",
            role=role.value,
            clients_scanned=len(clients),
            due=len(items),
        )
        return sort_due_list(items)


cadence_service = CadenceService()
