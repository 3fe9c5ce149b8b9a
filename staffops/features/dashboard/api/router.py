"""
Dashboard routes.

Every endpoint reads the clock once and hands that instant to the services
so all numbers in one response describe the same moment.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from staffops.auth.viewer import viewer_dependency
from staffops.config import settings
from staffops.features.dashboard.domain.models import ViewerScope
from staffops.features.dashboard.services.alert_service import alert_service
from staffops.features.dashboard.services.cadence_service import cadence_service
from staffops.features.dashboard.services.dashboard_service import dashboard_service
from staffops.infrastructure.observability.logging import get_logger
from staffops.models.api.dashboard_response import (
    AlertResponse,
    AlertsListResponse,
    CadenceItemResponse,
    CadenceListResponse,
    DashboardSummaryResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    scope: ViewerScope = Query(ViewerScope.RECRUITER, description="Viewer scope"),
    viewer_id: int = Depends(viewer_dependency),
):
    """Full dashboard for the viewer. Failed sections come back null and listed."""
    summary = await dashboard_service.get_dashboard_summary(viewer_id, scope)
    return DashboardSummaryResponse.model_validate(summary)


@router.get("/cadence", response_model=CadenceListResponse)
async def get_cadence_due_list(
    role: ViewerScope = Query(ViewerScope.FIELD_MANAGER, description="Viewer role"),
    viewer_id: int = Depends(viewer_dependency),
):
    """Clients that are overdue or due for contact within a week."""
    try:
        items = await cadence_service.get_cadence_due_list(role, datetime.now(settings.tzinfo()))
    except Exception as e:
        logger.error("Error computing cadence due list", viewer_id=viewer_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute cadence due list",
        )

    responses = [CadenceItemResponse.model_validate(item) for item in items]
    return CadenceListResponse(
        items=responses,
        total_count=len(responses),
        overdue_count=sum(1 for item in responses if item.is_overdue),
    )


@router.get("/alerts", response_model=AlertsListResponse)
async def get_alerts(viewer_id: int = Depends(viewer_dependency)):
    """Operational alerts derived from current vacancy and pipeline state."""
    try:
        alerts = await alert_service.get_alerts(datetime.now(settings.tzinfo()))
    except Exception as e:
        logger.error("Error deriving alerts", viewer_id=viewer_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to derive alerts",
        )

    return AlertsListResponse(
        alerts=[AlertResponse.model_validate(alert) for alert in alerts],
        total_count=len(alerts),
    )
