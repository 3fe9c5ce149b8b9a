"""
Standalone client completeness scan.
"""

import asyncio

from staffops.db.pool import worker_db_pool
from staffops.features.completeness.services.watchdog_service import completeness_watchdog
from staffops.infrastructure.observability.logging import log_job_summary


async def run_completeness_scan_job() -> None:
    async with worker_db_pool():
        result = await completeness_watchdog.check_all_clients_for_missing_contact_persons()

    log_job_summary(
        "completeness_scan",
        True,
        total_clients=result.total_clients,
        clients_with_missing_contact=result.clients_with_missing_contact,
        todos_created=result.todos_created,
    )


if __name__ == "__main__":
    asyncio.run(run_completeness_scan_job())
