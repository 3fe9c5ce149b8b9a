"""
Repository helpers for client completeness follow-ups.

Reads clients and admin users and manages contact-person rows in the todos
table. A contact-person todo is identified by related_type = 'client', the
client id and its title prefix.
"""

from datetime import datetime

from staffops.db.helpers import execute_query, execute_returning, fetch_all, fetch_one
from staffops.features.completeness.domain.models import (
    CONTACT_PERSON_FIELDS,
    TODO_TITLE_PREFIX,
    Client,
    CompletenessTodo,
    ResponsibleUser,
    find_missing_fields,
)

_CLIENT_COLUMNS = """
    id, name, contact_name, contact_email, contact_phone,
    industry, location, website, description
"""


def _client_from_row(row: dict) -> Client:
    return Client(
        id=row["id"],
        name=row["name"],
        contact_name=row.get("contact_name"),
        contact_email=row.get("contact_email"),
        contact_phone=row.get("contact_phone"),
        industry=row.get("industry"),
        location=row.get("location"),
        website=row.get("website"),
        description=row.get("description"),
    )


def _todo_from_row(row: dict, missing_fields: list[str] | None = None) -> CompletenessTodo:
    return CompletenessTodo(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row.get("description") or "",
        due_date=row["due_date"],
        priority=row["priority"],
        status=row["status"],
        related_type=row["related_type"],
        related_id=row["related_id"],
        missing_fields=missing_fields or [],
    )


class CompletenessRepository:
    @classmethod
    async def fetch_client(cls, client_id: int) -> Client | None:
        row = await fetch_one(f"SELECT {_CLIENT_COLUMNS} FROM clients WHERE id = %s", (client_id,))
        return _client_from_row(row) if row else None

    @classmethod
    async def fetch_clients(cls) -> list[Client]:
        rows = await fetch_all(f"SELECT {_CLIENT_COLUMNS} FROM clients ORDER BY id")
        return [_client_from_row(row) for row in rows]

    @classmethod
    async def fetch_admin_users(cls) -> list[ResponsibleUser]:
        rows = await fetch_all(
            "SELECT id, email, full_name FROM users WHERE role = 'admin' ORDER BY id"
        )
        return [
            ResponsibleUser(id=row["id"], email=row["email"], full_name=row.get("full_name"))
            for row in rows
        ]

    @classmethod
    async def find_open_contact_todos(cls, user_id: int, client_id: int) -> list[CompletenessTodo]:
        rows = await fetch_all(
            """
            SELECT t.id, t.user_id, t.title, t.description, t.due_date, t.priority,
                   t.status, t.related_type, t.related_id,
                   c.contact_name, c.contact_email, c.contact_phone
            FROM todos t
            JOIN clients c ON c.id = t.related_id
            WHERE t.user_id = %s
              AND t.related_type = 'client'
              AND t.related_id = %s
              AND t.status = 'pending'
              AND t.title LIKE %s
            ORDER BY t.id
            """,
            (user_id, client_id, f"{TODO_TITLE_PREFIX}%"),
        )
        # missing fields are not stored; derive them from the client as it is now
        return [
            _todo_from_row(row, find_missing_fields(row, CONTACT_PERSON_FIELDS)) for row in rows
        ]

    @classmethod
    async def create_todo(
        cls,
        user_id: int,
        title: str,
        description: str,
        priority: str,
        due_date: datetime,
        client_id: int,
        missing_fields: list[str],
    ) -> CompletenessTodo:
        row = await execute_returning(
            """
            INSERT INTO todos (
                user_id, title, description, due_date, priority, status,
                related_type, related_id, created_at
            )
            VALUES (%s, %s, %s, %s, %s, 'pending', 'client', %s, NOW())
            RETURNING id, user_id, title, description, due_date, priority, status,
                      related_type, related_id
            """,
            (user_id, title, description, due_date, priority, client_id),
        )
        return _todo_from_row(row, missing_fields)

    @classmethod
    async def complete_todo(cls, todo_id: int) -> bool:
        affected = await execute_query(
            "UPDATE todos SET status = 'completed', completed = true WHERE id = %s AND status = 'pending'",
            (todo_id,),
        )
        return affected > 0
