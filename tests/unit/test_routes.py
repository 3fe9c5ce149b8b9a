from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeSyncRunRepository
from staffops.features.completeness.api.router import router as completeness_router
from staffops.features.completeness.domain.models import Client
from staffops.features.completeness.services.client_enrichment_service import (
    ClientEnrichmentService,
    ClientNotificationLog,
)
from staffops.features.completeness.services.watchdog_service import CompletenessWatchdog
from staffops.features.dashboard.api.router import router as dashboard_router
from staffops.features.dashboard.domain.models import VacancySnapshot
from staffops.features.dashboard.services.alert_service import AlertService
from staffops.features.dashboard.services.dashboard_service import DashboardService
from staffops.features.sync.api.router import router as sync_router
from staffops.features.sync.domain.models import (
    DailySyncDecision,
    RecomputeReport,
    SyncRun,
    SyncRunStatus,
)


def _create_app(*routers, apply_viewer_override=None):
    app = FastAPI()
    if apply_viewer_override:
        apply_viewer_override(app)
    for router in routers:
        app.include_router(router)
    return app


def test_dashboard_summary(monkeypatch, dashboard_repo, apply_viewer_override):
    monkeypatch.setattr(
        "staffops.features.dashboard.api.router.dashboard_service",
        DashboardService(dashboard_repo),
    )
    client = TestClient(_create_app(dashboard_router, apply_viewer_override=apply_viewer_override))

    response = client.get("/dashboard/summary", params={"scope": "field_manager"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["scope"] == "field_manager"
    assert payload["degraded_sections"] == []
    assert payload["kpis"]["recruiter"] is None
    assert payload["pipeline_summary"]["today"]["change_vs_previous"]["total_candidates"] == 0


def test_dashboard_summary_reports_degraded_sections(monkeypatch, dashboard_repo):
    dashboard_repo.failing.add("fetch_open_vacancies_without_candidates")
    monkeypatch.setattr(
        "staffops.features.dashboard.api.router.dashboard_service",
        DashboardService(dashboard_repo),
    )
    client = TestClient(_create_app(dashboard_router))

    response = client.get("/dashboard/summary", headers={"X-User-Id": "42"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["alerts"] is None
    assert payload["degraded_sections"] == ["alerts"]


def test_dashboard_requires_viewer():
    client = TestClient(_create_app(dashboard_router))

    assert client.get("/dashboard/alerts").status_code == 401
    assert client.get("/dashboard/alerts", headers={"X-User-Id": "abc"}).status_code == 401


def test_dashboard_alerts(monkeypatch, dashboard_repo, apply_viewer_override):
    dashboard_repo.vacancies = [
        VacancySnapshot(id=11, title="Forklift driver", status="open", linked_candidates=0)
    ]
    monkeypatch.setattr(
        "staffops.features.dashboard.api.router.alert_service", AlertService(dashboard_repo)
    )
    client = TestClient(_create_app(dashboard_router, apply_viewer_override=apply_viewer_override))

    response = client.get("/dashboard/alerts")

    assert response.status_code == 200
    payload = response.json()
    assert payload["total_count"] == 1
    assert payload["alerts"][0]["id"] == "vacancy-no-candidates-11"


def test_dashboard_cadence_failure_is_500(monkeypatch, apply_viewer_override):
    failing = SimpleNamespace(get_cadence_due_list=AsyncMock(side_effect=RuntimeError("db down")))
    monkeypatch.setattr("staffops.features.dashboard.api.router.cadence_service", failing)
    client = TestClient(_create_app(dashboard_router, apply_viewer_override=apply_viewer_override))

    response = client.get("/dashboard/cadence")

    assert response.status_code == 500


def test_sync_status(monkeypatch):
    completed_at = datetime.now(UTC) - timedelta(minutes=5)
    fake_service = SimpleNamespace(
        sync_runs=FakeSyncRunRepository(
            SyncRun(
                id=1,
                sync_type="full",
                status=SyncRunStatus.COMPLETED,
                started_at=completed_at - timedelta(minutes=30),
                completed_at=completed_at,
            )
        ),
        is_running=False,
        last_trigger="daily_startup",
        last_report=RecomputeReport(processed=4, failed=1, failed_vacancy_ids=[9]),
    )
    monkeypatch.setattr("staffops.features.sync.api.router.daily_sync_service", fake_service)
    client = TestClient(_create_app(sync_router))

    response = client.get("/sync/status")

    assert response.status_code == 200
    payload = response.json()
    assert payload["running"] is False
    assert payload["last_trigger"] == "daily_startup"
    assert payload["last_report"]["failed_vacancy_ids"] == [9]


def test_sync_status_with_unknown_last_sync(monkeypatch):
    fake_service = SimpleNamespace(
        sync_runs=FakeSyncRunRepository(error=RuntimeError("db down")),
        is_running=False,
        last_trigger=None,
        last_report=None,
    )
    monkeypatch.setattr("staffops.features.sync.api.router.daily_sync_service", fake_service)
    client = TestClient(_create_app(sync_router))

    payload = client.get("/sync/status").json()

    assert payload["synced_today"] is None
    assert payload["last_completed_at"] is None


def test_manual_sync_trigger(monkeypatch):
    fake_service = SimpleNamespace(
        trigger_manual_sync=AsyncMock(return_value=DailySyncDecision.SYNC_STARTED),
        is_running=True,
    )
    monkeypatch.setattr("staffops.features.sync.api.router.daily_sync_service", fake_service)
    client = TestClient(_create_app(sync_router))

    response = client.post("/sync/run")

    assert response.status_code == 202
    assert response.json() == {"decision": "sync_started", "running": True}


def test_create_todos_for_unknown_client_is_404(monkeypatch, completeness_repo):
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.completeness_watchdog",
        CompletenessWatchdog(completeness_repo),
    )
    client = TestClient(_create_app(completeness_router))

    response = client.post("/completeness/clients/404/todos")

    assert response.status_code == 404


def test_create_and_complete_todos(monkeypatch, completeness_repo):
    acme = completeness_repo.add_client(Client(id=7, name="Acme", contact_email="j@acme.example"))
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.completeness_watchdog",
        CompletenessWatchdog(completeness_repo),
    )
    client = TestClient(_create_app(completeness_router))

    created = client.post("/completeness/clients/7/todos").json()
    acme.contact_name = "Jane"
    acme.contact_phone = "+31 20 123 4567"
    completed = client.post("/completeness/clients/7/complete").json()

    assert created["created_count"] == 2
    assert created["todos"][0]["missing_fields"] == ["contact name", "contact phone"]
    assert completed == {"client_id": 7, "completed_count": 2}


def test_completeness_scan(monkeypatch, completeness_repo):
    completeness_repo.add_client(Client(id=9, name="Initech"))
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.completeness_watchdog",
        CompletenessWatchdog(completeness_repo),
    )
    client = TestClient(_create_app(completeness_router))

    response = client.post("/completeness/scan")

    assert response.json() == {
        "total_clients": 1,
        "clients_with_missing_contact": 1,
        "todos_created": 2,
    }


def test_enrich_client_without_website(monkeypatch, completeness_repo):
    completeness_repo.add_client(Client(id=9, name="Initech"))
    service = ClientEnrichmentService(ClientNotificationLog())
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.completeness_watchdog",
        CompletenessWatchdog(completeness_repo),
    )
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.client_enrichment_service", service
    )
    client = TestClient(_create_app(completeness_router))

    payload = client.post("/completeness/clients/9/enrich").json()

    assert payload["logo_url"] is None
    assert payload["missing_info"]["priority"] == "high"
    assert [n.type for n in service.notifications.entries()] == ["logo_missing", "missing_info"]


def test_notifications_list_and_resolve(monkeypatch):
    service = ClientEnrichmentService(ClientNotificationLog())
    notification = service.notifications.add("missing_info", 1, "Acme", "Acme is missing", "medium")
    monkeypatch.setattr(
        "staffops.features.completeness.api.router.client_enrichment_service", service
    )
    client = TestClient(_create_app(completeness_router))

    listed = client.get("/notifications/client-updates").json()
    resolved = client.post(f"/notifications/{notification.id}/resolve")
    missing = client.post("/notifications/notif_unknown/resolve")

    assert listed["total_count"] == 1
    assert listed["notifications"][0]["client_name"] == "Acme"
    assert resolved.status_code == 200
    assert missing.status_code == 404
    assert client.get("/notifications/client-updates").json()["total_count"] == 0
