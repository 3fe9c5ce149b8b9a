# staffops/models/api/completeness_response.py
"""
Client completeness and notification API response models.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CompletenessTodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Todo ID")
    user_id: int = Field(..., description="Admin the todo is assigned to")
    title: str
    description: str
    due_date: datetime
    priority: str = Field(..., description="medium, or high above three missing fields")
    status: str
    related_type: str
    related_id: int = Field(..., description="Client ID")
    missing_fields: list[str] = Field(default_factory=list)


class CreateTodosResponse(BaseModel):
    client_id: int
    todos: list[CompletenessTodoResponse] = Field(..., description="Todos created by this call")
    created_count: int


class CompleteTodosResponse(BaseModel):
    client_id: int
    completed_count: int = Field(..., description="Open todos closed by this call")


class CompletenessScanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_clients: int
    clients_with_missing_contact: int
    todos_created: int


class ClientNotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str = Field(..., description="missing_info, enhancement_failed or logo_missing")
    client_id: int
    client_name: str
    message: str
    priority: str
    created_at: datetime
    resolved: bool


class ClientNotificationsListResponse(BaseModel):
    notifications: list[ClientNotificationResponse]
    total_count: int


class ClientEnrichmentResponse(BaseModel):
    client_id: int
    missing_info: ClientNotificationResponse | None = Field(
        None, description="Notification raised for missing profile fields, if any"
    )
    logo_url: str | None = Field(None, description="First logo URL that served an image")
