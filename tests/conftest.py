import asyncio
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from staffops.auth.viewer import viewer_dependency
from staffops.features.completeness.domain.models import (
    TODO_TITLE_PREFIX,
    Client,
    CompletenessTodo,
    ResponsibleUser,
)
from staffops.features.dashboard.domain.models import MetricWindow
from staffops.features.sync.domain.models import OpenVacancy, SyncRun, SyncRunStatus

AMSTERDAM = ZoneInfo("Europe/Amsterdam")


@pytest.fixture
def now():
    # A Wednesday afternoon
    return datetime(2025, 3, 12, 14, 30, tzinfo=AMSTERDAM)


@pytest.fixture
def viewer_override():
    def _override():
        return 42

    return _override


@pytest.fixture
def apply_viewer_override(viewer_override):
    def _apply(app):
        app.dependency_overrides[viewer_dependency] = viewer_override

    return _apply


class FakeDashboardRepository:
    """In-memory stand-in for DashboardRepository."""

    def __init__(self):
        self.events: dict[str, list[datetime]] = {}
        self.candidates: list[datetime] = []
        self.tasks = []
        self.margins: list[tuple[datetime, float]] = []
        self.vacancies = []
        self.links = []
        self.interactions = []
        self.clients = []
        self.pipeline_load = {
            "live_vacancies": 0,
            "total_candidates_matched": 0,
            "interviews_pipeline": 0,
            "offers_and_start_dates": 0,
        }
        self.failing: set[str] = set()
        self.calls: list[tuple] = []

    def add_events(self, metric: str, when: datetime, count: int = 1) -> None:
        self.events.setdefault(metric, []).extend([when] * count)

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    async def count_in_window(self, metric: str, window: MetricWindow) -> int:
        self._record("count_in_window", metric, window)
        return sum(1 for t in self.events.get(metric, []) if window.start <= t < window.end)

    async def count_candidates_before(self, end: datetime) -> int:
        self._record("count_candidates_before", end)
        return sum(1 for t in self.candidates if t < end)

    async def fetch_pending_tasks(self, owner_id, due_from, due_until):
        self._record("fetch_pending_tasks", owner_id, due_from, due_until)
        return [
            t for t in self.tasks if t.status == "pending" and due_from <= t.due_at <= due_until
        ]

    async def fetch_call_tasks(self, owner_id, due_from, due_until):
        self._record("fetch_call_tasks", owner_id, due_from, due_until)
        return [t for t in self.tasks if t.type == "call" and due_from <= t.due_at < due_until]

    async def sum_placement_margins(self, since, until) -> float:
        self._record("sum_placement_margins", since, until)
        return float(sum(m for t, m in self.margins if since <= t < until))

    async def fetch_open_vacancies_without_candidates(self):
        self._record("fetch_open_vacancies_without_candidates")
        return [v for v in self.vacancies if v.linked_candidates == 0]

    async def fetch_links_inactive_since(self, cutoff):
        self._record("fetch_links_inactive_since", cutoff)
        return [
            link
            for link in self.links
            if link.last_activity_at is not None and link.last_activity_at < cutoff
        ]

    async def fetch_user_interactions(self, user_id, since, until):
        self._record("fetch_user_interactions", user_id, since, until)
        return [i for i in self.interactions if since <= i.created_at < until]

    async def fetch_active_clients_with_last_contact(self):
        self._record("fetch_active_clients_with_last_contact")
        return list(self.clients)

    async def fetch_pipeline_load(self):
        self._record("fetch_pipeline_load")
        return dict(self.pipeline_load)


@pytest.fixture
def dashboard_repo():
    return FakeDashboardRepository()


class FakeSyncRunRepository:
    def __init__(self, latest: SyncRun | None = None, error: Exception | None = None):
        self.latest = latest
        self.error = error
        self.lookups = 0

    async def fetch_latest_completed(self) -> SyncRun | None:
        self.lookups += 1
        if self.error:
            raise self.error
        return self.latest


class FakeCrmSyncClient:
    """Records sync calls and writes a completed run on success."""

    def __init__(self, sync_runs: FakeSyncRunRepository, error: Exception | None = None):
        self.sync_runs = sync_runs
        self.error = error
        self.calls = 0
        self.release: asyncio.Event | None = None
        self.log: list[str] | None = None

    async def run_full_sync(self) -> None:
        self.calls += 1
        if self.log is not None:
            self.log.append("sync")
        if self.release is not None:
            await self.release.wait()
        if self.error:
            raise self.error

        self.sync_runs.latest = SyncRun(
            id=self.calls,
            sync_type="full",
            status=SyncRunStatus.COMPLETED,
            started_at=datetime.now(UTC),
            completed_at=datetime.now(UTC),
        )


class FakeMatchScorer:
    def __init__(self, failing_ids: set[int] | None = None):
        self.failing_ids = failing_ids or set()
        self.calls: list[int] = []
        self.log: list[str] | None = None

    async def match_candidates_to_vacancy(self, vacancy_id: int) -> None:
        self.calls.append(vacancy_id)
        if self.log is not None:
            self.log.append(f"match:{vacancy_id}")
        if vacancy_id in self.failing_ids:
            raise RuntimeError(f"matcher failed for {vacancy_id}")


class FakeVacancyRepository:
    def __init__(self, vacancy_ids: list[int] | None = None):
        self.vacancies = [OpenVacancy(id=i, title=f"Vacancy {i}") for i in vacancy_ids or []]

    async def fetch_open_vacancies(self) -> list[OpenVacancy]:
        return list(self.vacancies)


@pytest.fixture
def sync_runs():
    return FakeSyncRunRepository()


@pytest.fixture
def crm_client(sync_runs):
    return FakeCrmSyncClient(sync_runs)


@pytest.fixture
def match_scorer():
    return FakeMatchScorer()


class FakeCompletenessRepository:
    """In-memory clients, admins and todos."""

    def __init__(self):
        self.clients: dict[int, Client] = {}
        self.admins: list[ResponsibleUser] = []
        self.todos: list[CompletenessTodo] = []
        self.failing_todo_checks: set[int] = set()
        self.failing_creates: set[int] = set()
        self.admin_lookup_error: Exception | None = None

    def add_client(self, client: Client) -> Client:
        self.clients[client.id] = client
        return client

    async def fetch_client(self, client_id: int) -> Client | None:
        return self.clients.get(client_id)

    async def fetch_clients(self) -> list[Client]:
        return [self.clients[key] for key in sorted(self.clients)]

    async def fetch_admin_users(self) -> list[ResponsibleUser]:
        if self.admin_lookup_error:
            raise self.admin_lookup_error
        return list(self.admins)

    async def find_open_contact_todos(self, user_id: int, client_id: int):
        if user_id in self.failing_todo_checks:
            raise RuntimeError("todo lookup failed")
        return [
            todo
            for todo in self.todos
            if todo.user_id == user_id
            and todo.related_type == "client"
            and todo.related_id == client_id
            and todo.status == "pending"
            and todo.title.startswith(TODO_TITLE_PREFIX)
        ]

    async def create_todo(
        self, user_id, title, description, priority, due_date, client_id, missing_fields
    ) -> CompletenessTodo:
        if client_id in self.failing_creates:
            raise RuntimeError("insert failed")
        todo = CompletenessTodo(
            id=len(self.todos) + 1,
            user_id=user_id,
            title=title,
            description=description,
            due_date=due_date,
            priority=priority,
            status="pending",
            related_type="client",
            related_id=client_id,
            missing_fields=list(missing_fields),
        )
        self.todos.append(todo)
        return todo

    async def complete_todo(self, todo_id: int) -> bool:
        for todo in self.todos:
            if todo.id == todo_id and todo.status == "pending":
                todo.status = "completed"
                return True
        return False


@pytest.fixture
def completeness_repo():
    repo = FakeCompletenessRepository()
    repo.admins = [
        ResponsibleUser(id=1, email="ops@example.com", full_name="Ops Admin"),
        ResponsibleUser(id=2, email="lead@example.com", full_name="Team Lead"),
    ]
    return repo
