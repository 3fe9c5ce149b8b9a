"""
Client data completeness feature package.

Contact-person follow-up todos for admins and client profile notifications.
"""

from .domain.models import Client, CompletenessScanResult, CompletenessTodo  # noqa: F401
from .services.client_enrichment_service import (  # noqa: F401
    ClientEnrichmentService,
    client_enrichment_service,
)
from .services.watchdog_service import (  # noqa: F401
    ClientNotFoundError,
    CompletenessWatchdog,
    completeness_watchdog,
)
