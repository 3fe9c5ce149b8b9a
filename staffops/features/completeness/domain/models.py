"""
Domain models for client data completeness.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

TODO_TITLE_PREFIX = "Add contact person"

# Contact person fields that must be present on every client, with the label
# used in follow-up todos.
CONTACT_PERSON_FIELDS: dict[str, str] = {
    "contact_name": "contact name",
    "contact_email": "contact email",
    "contact_phone": "contact phone",
}

# Wider profile check used for client notifications
CLIENT_PROFILE_FIELDS: dict[str, str] = {
    "industry": "Industry",
    "location": "Location",
    "website": "Website",
    "description": "Description",
    "contact_name": "Contact Person",
    "contact_email": "Contact Email",
}


@dataclass(slots=True)
class Client:
    id: int
    name: str
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    industry: str | None = None
    location: str | None = None
    website: str | None = None
    description: str | None = None

    def as_fields(self) -> dict[str, str | None]:
        return {
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "industry": self.industry,
            "location": self.location,
            "website": self.website,
            "description": self.description,
        }


@dataclass(slots=True)
class ResponsibleUser:
    id: int
    email: str
    full_name: str | None = None


@dataclass(slots=True)
class CompletenessTodo:
    id: int
    user_id: int
    title: str
    description: str
    due_date: datetime
    priority: str
    status: str
    related_type: str
    related_id: int
    missing_fields: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CompletenessScanResult:
    total_clients: int
    clients_with_missing_contact: int
    todos_created: int


@dataclass(slots=True)
class ClientNotification:
    id: str
    type: str  # "missing_info" | "enhancement_failed" | "logo_missing"
    client_id: int
    client_name: str
    message: str
    priority: str
    created_at: datetime
    resolved: bool = False


def is_blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def find_missing_fields(values: Mapping[str, object], required: Mapping[str, str]) -> list[str]:
    """Labels of required fields that are absent, empty or whitespace-only."""
    return [label for name, label in required.items() if is_blank(values.get(name))]


def follow_up_priority(missing_count: int) -> str:
    # "high" is only reachable from the wider profile check; contact person checks have 3 fields
    return "high" if missing_count > 3 else "medium"
