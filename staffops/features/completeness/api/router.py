"""
Client completeness routes.

Contact-person follow-up todos for admins, plus the in-memory client
notification log.
"""

from fastapi import APIRouter, HTTPException, Query, status

from staffops.features.completeness.services.client_enrichment_service import (
    client_enrichment_service,
)
from staffops.features.completeness.services.watchdog_service import (
    ClientNotFoundError,
    completeness_watchdog,
)
from staffops.infrastructure.observability.logging import get_logger
from staffops.models.api.completeness_response import (
    ClientEnrichmentResponse,
    ClientNotificationResponse,
    ClientNotificationsListResponse,
    CompletenessScanResponse,
    CompletenessTodoResponse,
    CompleteTodosResponse,
    CreateTodosResponse,
)

logger = get_logger(__name__)

router = APIRouter(tags=["completeness"])


@router.post("/completeness/clients/{client_id}/todos", response_model=CreateTodosResponse)
async def create_contact_person_todos(client_id: int):
    """Create contact-person todos for one client, skipping admins who already have one."""
    try:
        todos = await completeness_watchdog.create_contact_person_todos(client_id)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("Error creating contact person todos", client_id=client_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create contact person todos",
        )

    return CreateTodosResponse(
        client_id=client_id,
        todos=[CompletenessTodoResponse.model_validate(todo) for todo in todos],
        created_count=len(todos),
    )


@router.post("/completeness/clients/{client_id}/complete", response_model=CompleteTodosResponse)
async def complete_contact_person_todos(client_id: int):
    """Close open contact-person todos if the client's contact details are now complete."""
    try:
        completed = await completeness_watchdog.complete_contact_person_todos(client_id)
    except Exception as e:
        logger.error("Error completing contact person todos", client_id=client_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete contact person todos",
        )

    return CompleteTodosResponse(client_id=client_id, completed_count=completed)


@router.post("/completeness/scan", response_model=CompletenessScanResponse)
async def scan_all_clients():
    """Check every client and create follow-up todos where contact details are missing."""
    try:
        result = await completeness_watchdog.check_all_clients_for_missing_contact_persons()
    except Exception as e:
        logger.error("Completeness scan failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Completeness scan failed",
        )

    return CompletenessScanResponse.model_validate(result)


@router.post("/completeness/clients/{client_id}/enrich", response_model=ClientEnrichmentResponse)
async def enrich_client(client_id: int):
    """Check the wider client profile and look for a company logo."""
    try:
        client = await completeness_watchdog.repository.fetch_client(client_id)
    except Exception as e:
        logger.error("Error loading client", client_id=client_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load client",
        )

    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Client {client_id} not found"
        )

    notification = client_enrichment_service.check_client_data_completeness(client)
    logo_url = await client_enrichment_service.find_company_logo(client)

    return ClientEnrichmentResponse(
        client_id=client_id,
        missing_info=(
            ClientNotificationResponse.model_validate(notification) if notification else None
        ),
        logo_url=logo_url,
    )


@router.get("/notifications/client-updates", response_model=ClientNotificationsListResponse)
async def list_client_notifications(
    resolved: bool = Query(False, description="Return resolved notifications instead"),
):
    """Client profile notifications, newest first."""
    notifications = client_enrichment_service.notifications.entries(resolved=resolved)
    return ClientNotificationsListResponse(
        notifications=[ClientNotificationResponse.model_validate(n) for n in notifications],
        total_count=len(notifications),
    )


@router.post("/notifications/{notification_id}/resolve")
async def resolve_notification(notification_id: str):
    if not client_enrichment_service.notifications.resolve(notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"success": True, "id": notification_id}
