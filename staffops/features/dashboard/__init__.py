"""
Operations dashboard feature package.

Pipeline metrics, contact cadence, alerts and the composed dashboard live
together here: domain models, the raw-SQL repository, services and the API
router.
"""

# Re-export the primary building blocks for easy access.
from .domain.models import (  # noqa: F401
    Alert,
    CadenceItem,
    DashboardSummary,
    MetricWindow,
    ViewerScope,
)
from .services import (  # noqa: F401
    AlertService,
    CadenceService,
    DashboardService,
    PipelineMetricsService,
)
