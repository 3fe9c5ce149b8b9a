"""
Service layer for the dashboard feature.
"""

from .alert_service import AlertService, derive_alerts
from .cadence_service import CadenceService, select_cadence_tier
from .dashboard_service import DashboardService
from .metrics_service import PipelineMetricsService, pipeline_metrics_service

__all__ = [
    "AlertService",
    "derive_alerts",
    "CadenceService",
    "select_cadence_tier",
    "DashboardService",
    "PipelineMetricsService",
    "pipeline_metrics_service",
]
