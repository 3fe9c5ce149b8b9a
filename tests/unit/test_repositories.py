"""
Tests for the raw SQL helpers and repository parameter handling.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock

import psycopg
import pytest

from staffops.db import helpers
from staffops.db.helpers import DatabaseError
from staffops.features.completeness.repository import CompletenessRepository
from staffops.features.dashboard.domain.models import MetricWindow
from staffops.features.dashboard.repository import DashboardRepository
from staffops.features.sync.domain.models import SyncRunStatus
from staffops.features.sync.repository import SyncRunRepository


class FakeCursor:
    def __init__(self, row=None, error=None):
        self.row = row
        self.error = error
        self.executed = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params):
        self.executed.append((query, params))
        if self.error:
            raise self.error

    async def fetchone(self):
        return self.row


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


def _patch_connection(monkeypatch, cursor: FakeCursor) -> None:
    @asynccontextmanager
    async def _connection():
        yield FakeConnection(cursor)

    async def _get_connection():
        return _connection()

    monkeypatch.setattr(helpers, "get_db_connection", _get_connection)
    monkeypatch.setattr(helpers, "get_db_transaction", _get_connection)


@pytest.mark.asyncio
async def test_fetch_val_returns_first_column(monkeypatch):
    _patch_connection(monkeypatch, FakeCursor(row={"count": 5}))

    assert await helpers.fetch_val("SELECT COUNT(*) AS count FROM clients") == 5


@pytest.mark.asyncio
async def test_psycopg_errors_become_database_errors(monkeypatch):
    _patch_connection(monkeypatch, FakeCursor(error=psycopg.OperationalError("server closed")))

    with pytest.raises(DatabaseError) as exc_info:
        await helpers.fetch_one("SELECT 1")

    assert exc_info.value.operation == "fetch_one"
    assert exc_info.value.recoverable is True


@pytest.mark.asyncio
async def test_execute_returning_requires_a_row(monkeypatch):
    _patch_connection(monkeypatch, FakeCursor(row=None))

    with pytest.raises(DatabaseError):
        await helpers.execute_returning("INSERT INTO todos DEFAULT VALUES RETURNING id")


@pytest.mark.asyncio
async def test_count_in_window_passes_bounds(monkeypatch, now):
    fetch_val = AsyncMock(return_value=None)
    monkeypatch.setattr("staffops.features.dashboard.repository.fetch_val", fetch_val)
    window = MetricWindow(start=now - timedelta(days=1), end=now)

    assert await DashboardRepository.count_in_window("placements", window) == 0

    query, params = fetch_val.await_args.args
    assert params == (window.start, window.end)
    assert "created_at < %s" in query


@pytest.mark.asyncio
async def test_count_in_window_rejects_unknown_metric(now):
    with pytest.raises(ValueError):
        await DashboardRepository.count_in_window("revenue", MetricWindow(now, now))


@pytest.mark.asyncio
async def test_latest_completed_sync(monkeypatch, now):
    row = {
        "id": 3,
        "sync_type": "full",
        "status": "completed",
        "started_at": now - timedelta(minutes=20),
        "completed_at": now,
    }
    monkeypatch.setattr("staffops.features.sync.repository.fetch_one", AsyncMock(return_value=row))

    run = await SyncRunRepository.fetch_latest_completed()

    assert run.status == SyncRunStatus.COMPLETED
    assert run.completed_at == now


@pytest.mark.asyncio
async def test_open_contact_todos_match_title_prefix(monkeypatch):
    fetch_all = AsyncMock(return_value=[])
    monkeypatch.setattr("staffops.features.completeness.repository.fetch_all", fetch_all)

    await CompletenessRepository.find_open_contact_todos(1, 7)

    _, params = fetch_all.await_args.args
    assert params == (1, 7, "Add contact person%")


@pytest.mark.asyncio
async def test_complete_todo_reports_affected_rows(monkeypatch):
    monkeypatch.setattr(
        "staffops.features.completeness.repository.execute_query", AsyncMock(return_value=0)
    )

    assert await CompletenessRepository.complete_todo(99) is False


@pytest.mark.asyncio
async def test_open_contact_todos_carry_current_missing_fields(monkeypatch, now):
    row = {
        "id": 3,
        "user_id": 1,
        "title": "Add contact person for Acme",
        "description": "",
        "due_date": now,
        "priority": "medium",
        "status": "pending",
        "related_type": "client",
        "related_id": 7,
        "contact_name": None,
        "contact_email": "a@b.com",
        "contact_phone": "  ",
    }
    monkeypatch.setattr(
        "staffops.features.completeness.repository.fetch_all", AsyncMock(return_value=[row])
    )

    [todo] = await CompletenessRepository.find_open_contact_todos(1, 7)

    assert todo.missing_fields == ["contact name", "contact phone"]
