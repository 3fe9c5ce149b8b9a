"""
Client contact-person completeness watchdog.

Creates one follow-up todo per admin user for every client that lacks
contact person details, and closes those todos once the details are filled
in. At most one open contact-person todo exists per (client, admin) pair.
"""

from datetime import datetime, timedelta

from staffops.config import settings
from staffops.features.completeness.domain.models import (
    CONTACT_PERSON_FIELDS,
    TODO_TITLE_PREFIX,
    Client,
    CompletenessScanResult,
    CompletenessTodo,
    ResponsibleUser,
    find_missing_fields,
    follow_up_priority,
)
from staffops.features.completeness.repository import CompletenessRepository
from staffops.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

FOLLOW_UP_DUE_IN = timedelta(days=7)


class ClientNotFoundError(Exception):
    def __init__(self, client_id: int):
        super().__init__(f"Client {client_id} not found")
        self.client_id = client_id


class CompletenessWatchdog:
    def __init__(self, repository=CompletenessRepository, required_fields=CONTACT_PERSON_FIELDS):
        self.repository = repository
        self.required_fields = required_fields

    def missing_fields(self, client: Client) -> list[str]:
        return find_missing_fields(client.as_fields(), self.required_fields)

    async def create_contact_person_todos(
        self, client_id: int, now: datetime | None = None
    ) -> list[CompletenessTodo]:
        """
        Create contact-person todos for a single client.

        Raises:
            ClientNotFoundError: If the client does not exist
        """
        client = await self.repository.fetch_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        return await self._create_todos_for_client(client, now or datetime.now(settings.tzinfo()))

    async def check_all_clients_for_missing_contact_persons(
        self, now: datetime | None = None
    ) -> CompletenessScanResult:
        now = now or datetime.now(settings.tzinfo())
        clients = await self.repository.fetch_clients()
        incomplete = [client for client in clients if self.missing_fields(client)]

        todos_created = 0
        for client in incomplete:
            try:
                created = await self._create_todos_for_client(client, now)
            except Exception as e:
                logger.error(
                    "Failed to create contact person todos",
                    client_id=client.id,
                    error=str(e),
                )
                continue
            todos_created += len(created)

        result = CompletenessScanResult(
            total_clients=len(clients),
            clients_with_missing_contact=len(incomplete),
            todos_created=todos_created,
        )
        logger.info(
            "Contact person check completed",
            total_clients=result.total_clients,
            clients_with_missing_contact=result.clients_with_missing_contact,
            todos_created=result.todos_created,
        )
        return result

    async def complete_contact_person_todos(self, client_id: int) -> int:
        """Close open contact-person todos once the client is complete. Returns the count."""
        client = await self.repository.fetch_client(client_id)
        if client is None or self.missing_fields(client):
            return 0

        completed = 0
        for admin in await self._get_admin_users():
            for todo in await self.repository.find_open_contact_todos(admin.id, client_id):
                if await self.repository.complete_todo(todo.id):
                    completed += 1

        if completed:
            logger.info("Completed contact person todos", client_id=client_id, count=completed)
        return completed

    async def _create_todos_for_client(
        self, client: Client, now: datetime
    ) -> list[CompletenessTodo]:
        missing = self.missing_fields(client)
        if not missing:
            logger.debug("Client contact person complete", client_id=client.id)
            return []

        admins = await self._get_admin_users()
        if not admins:
            logger.warning("No admin users found to assign contact person todos")
            return []

        created = []
        for admin in admins:
            if await self._has_open_todo(admin, client):
                continue

            todo = await self.repository.create_todo(
                user_id=admin.id,
                title=f"{TODO_TITLE_PREFIX} for {client.name}",
                description=(
                    f'Client "{client.name}" is missing contact person information. '
                    f"Please add: {', '.join(missing)}."
                ),
                priority=follow_up_priority(len(missing)),
                due_date=now + FOLLOW_UP_DUE_IN,
                client_id=client.id,
                missing_fields=missing,
            )
            created.append(todo)
            logger.info(
                "Created contact person todo",
                client_id=client.id,
                user_id=admin.id,
                missing_fields=missing,
            )

        return created

    async def _has_open_todo(self, admin: ResponsibleUser, client: Client) -> bool:
        """True if an open todo exists, or if that cannot be determined."""
        try:
            existing = await self.repository.find_open_contact_todos(admin.id, client.id)
        except Exception as e:
            logger.warning(
                "Open todo check failed; skipping todo creation",
                client_id=client.id,
                user_id=admin.id,
                error=str(e),
            )
            return True
        return bool(existing)

    async def _get_admin_users(self) -> list[ResponsibleUser]:
        try:
            return await self.repository.fetch_admin_users()
        except Exception as e:
            logger.error("Error fetching admin users", error=str(e))
            return []


completeness_watchdog = CompletenessWatchdog()
