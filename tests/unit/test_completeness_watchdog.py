from datetime import timedelta

import pytest

from staffops.features.completeness.domain.models import (
    CONTACT_PERSON_FIELDS,
    Client,
    find_missing_fields,
    follow_up_priority,
)
from staffops.features.completeness.services.watchdog_service import (
    ClientNotFoundError,
    CompletenessWatchdog,
)


def _acme(**overrides) -> Client:
    fields = {
        "id": 7,
        "name": "Acme",
        "contact_name": None,
        "contact_email": "jane@acme.example",
        "contact_phone": "   ",
    }
    fields.update(overrides)
    return Client(**fields)


def test_blank_means_none_empty_or_whitespace():
    values = {"contact_name": "", "contact_email": "\t", "contact_phone": None}

    assert find_missing_fields(values, CONTACT_PERSON_FIELDS) == [
        "contact name",
        "contact email",
        "contact phone",
    ]


@pytest.mark.parametrize(("missing", "priority"), [(1, "medium"), (3, "medium"), (4, "high")])
def test_follow_up_priority(missing, priority):
    assert follow_up_priority(missing) == priority


@pytest.mark.asyncio
async def test_creates_one_todo_per_admin(completeness_repo, now):
    completeness_repo.add_client(_acme())
    watchdog = CompletenessWatchdog(completeness_repo)

    todos = await watchdog.create_contact_person_todos(7, now=now)

    assert [todo.user_id for todo in todos] == [1, 2]
    for todo in todos:
        assert todo.missing_fields == ["contact name", "contact phone"]
        assert todo.priority == "medium"
        assert todo.due_date == now + timedelta(days=7)
        assert todo.related_type == "client"
        assert todo.related_id == 7
        assert todo.title == "Add contact person for Acme"
        assert "contact name, contact phone" in todo.description


@pytest.mark.asyncio
async def test_contact_todos_stay_medium_with_all_contact_fields_missing(
    completeness_repo, now
):
    completeness_repo.add_client(_acme(contact_email=None))
    watchdog = CompletenessWatchdog(completeness_repo)

    todos = await watchdog.create_contact_person_todos(7, now=now)

    assert {todo.priority for todo in todos} == {"medium"}
    assert todos[0].missing_fields == ["contact name", "contact email", "contact phone"]


@pytest.mark.asyncio
async def test_second_run_creates_nothing(completeness_repo, now):
    completeness_repo.add_client(_acme())
    watchdog = CompletenessWatchdog(completeness_repo)

    await watchdog.create_contact_person_todos(7, now=now)
    again = await watchdog.create_contact_person_todos(7, now=now + timedelta(days=1))

    assert again == []
    assert len(completeness_repo.todos) == 2


@pytest.mark.asyncio
async def test_failed_existence_check_skips_that_admin(completeness_repo, now):
    completeness_repo.add_client(_acme())
    completeness_repo.failing_todo_checks.add(1)
    watchdog = CompletenessWatchdog(completeness_repo)

    todos = await watchdog.create_contact_person_todos(7, now=now)

    assert [todo.user_id for todo in todos] == [2]


@pytest.mark.asyncio
async def test_complete_client_gets_no_todos(completeness_repo, now):
    completeness_repo.add_client(_acme(contact_name="Jane", contact_phone="+31 20 123 4567"))
    watchdog = CompletenessWatchdog(completeness_repo)

    assert await watchdog.create_contact_person_todos(7, now=now) == []


@pytest.mark.asyncio
async def test_unknown_client_raises(completeness_repo):
    watchdog = CompletenessWatchdog(completeness_repo)

    with pytest.raises(ClientNotFoundError):
        await watchdog.create_contact_person_todos(404)


@pytest.mark.asyncio
async def test_admin_lookup_failure_creates_nothing(completeness_repo, now):
    completeness_repo.add_client(_acme())
    completeness_repo.admin_lookup_error = RuntimeError("users table locked")
    watchdog = CompletenessWatchdog(completeness_repo)

    assert await watchdog.create_contact_person_todos(7, now=now) == []


@pytest.mark.asyncio
async def test_scan_all_clients(completeness_repo, now):
    completeness_repo.add_client(_acme())
    completeness_repo.add_client(
        Client(id=8, name="Globex", contact_name="Hank", contact_email="h@globex.example",
               contact_phone="555-0100")
    )
    completeness_repo.add_client(Client(id=9, name="Initech"))
    watchdog = CompletenessWatchdog(completeness_repo)

    result = await watchdog.check_all_clients_for_missing_contact_persons(now=now)
    rerun = await watchdog.check_all_clients_for_missing_contact_persons(now=now)

    assert result.total_clients == 3
    assert result.clients_with_missing_contact == 2
    assert result.todos_created == 4
    assert rerun.todos_created == 0


@pytest.mark.asyncio
async def test_scan_isolates_failing_client(completeness_repo, now):
    completeness_repo.add_client(_acme())
    completeness_repo.add_client(Client(id=9, name="Initech"))
    completeness_repo.failing_creates.add(7)
    watchdog = CompletenessWatchdog(completeness_repo)

    result = await watchdog.check_all_clients_for_missing_contact_persons(now=now)

    assert result.todos_created == 2
    assert {todo.related_id for todo in completeness_repo.todos} == {9}


@pytest.mark.asyncio
async def test_completing_details_closes_todos(completeness_repo, now):
    client = completeness_repo.add_client(_acme())
    watchdog = CompletenessWatchdog(completeness_repo)
    await watchdog.create_contact_person_todos(7, now=now)

    assert await watchdog.complete_contact_person_todos(7) == 0

    client.contact_name = "Jane Doe"
    client.contact_phone = "+31 20 123 4567"
    completed = await watchdog.complete_contact_person_todos(7)

    assert completed == 2
    assert {todo.status for todo in completeness_repo.todos} == {"completed"}
