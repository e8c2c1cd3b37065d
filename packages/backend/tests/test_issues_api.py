"""Issue API tests — CRUD, validation, status transitions, counts.

Learn: These tests verify the issue lifecycle end to end:
1. Creation defaults (status Open) and field validation
2. Partial updates, with owner/id immutable
3. resolve/close from any status, and reopening a closed issue
4. Delete → 404 afterwards
5. Per-status counts with zero-filled keys

Pattern: Build up test data using the API, as the authenticated test user.
"""

import uuid

import pytest
import pytest_asyncio

from issuetracker.db.models import Issue, User
from issuetracker.enums import IssuePriority


async def _create(client, **overrides) -> dict:
    body = {
        "title": "Login broken",
        "description": "Cannot log in with valid credentials",
        "priority": "High",
    }
    body.update(overrides)
    r = await client.post("/api/issues", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest_asyncio.fixture()
async def issue(client):
    return await _create(client)


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_issue_defaults(client, test_user):
    """Status defaults to Open; severity is absent when not given."""
    r = await client.post(
        "/api/issues",
        json={
            "title": "Login broken",
            "description": "Cannot log in with valid credentials",
            "priority": "High",
        },
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Issue created successfully"
    data = body["data"]
    assert data["status"] == "Open"
    assert data["priority"] == "High"
    assert "severity" not in data
    assert data["owner_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_create_issue_with_status_and_severity(client):
    data = await _create(client, status="In Progress", severity="Major")
    assert data["status"] == "In Progress"
    assert data["severity"] == "Major"


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_owner(client, test_user):
    data = await _create(client, owner_id=str(uuid.uuid4()))
    assert data["owner_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_create_sanitizes_strings(client):
    data = await _create(client, title="  <b>Bold</b> title  ")
    assert data["title"] == "bBold/b title"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"title": "ab"}, "title"),
        ({"title": "x" * 201}, "title"),
        ({"description": "too short"}, "description"),
        ({"priority": "Urgent"}, "priority"),
        ({"severity": "Catastrophic"}, "severity"),
        ({"status": "Done"}, "status"),
    ],
)
async def test_create_validation_errors(client, overrides, field):
    body = {
        "title": "Valid title",
        "description": "A description that is long enough",
        "priority": "Low",
        **overrides,
    }
    r = await client.post("/api/issues", json=body)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert field in r.json()["message"]


@pytest.mark.asyncio
async def test_create_requires_priority(client):
    r = await client.post(
        "/api/issues",
        json={"title": "No priority", "description": "Priority is a required field"},
    )
    assert r.status_code == 400
    assert "priority" in r.json()["message"]


# ═══════════════════════════════════════════════════════════
# Read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_issue(client, issue):
    r = await client.get(f"/api/issues/{issue['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Login broken"


@pytest.mark.asyncio
async def test_get_missing_issue(client):
    r = await client.get(f"/api/issues/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["success"] is False
    assert r.json()["message"] == "Issue not found"


@pytest.mark.asyncio
async def test_get_malformed_id_is_not_found(client):
    r = await client.get("/api/issues/not-a-uuid")
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_applies_only_supplied_fields(client, issue):
    r = await client.put(f"/api/issues/{issue['id']}", json={"priority": "Critical"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["priority"] == "Critical"
    assert data["title"] == issue["title"]
    assert data["description"] == issue["description"]
    assert data["status"] == "Open"


@pytest.mark.asyncio
async def test_update_cannot_change_owner_or_id(client, issue):
    r = await client.put(
        f"/api/issues/{issue['id']}",
        json={"owner_id": str(uuid.uuid4()), "id": str(uuid.uuid4()), "title": "Renamed"},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == issue["id"]
    assert data["owner_id"] == issue["owner_id"]
    assert data["title"] == "Renamed"


@pytest.mark.asyncio
async def test_update_rejects_invalid_enum(client, issue):
    r = await client.put(f"/api/issues/{issue['id']}", json={"status": "Reopened"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_rejects_null_title(client, issue):
    r = await client.put(f"/api/issues/{issue['id']}", json={"title": None})
    assert r.status_code == 400
    assert "title cannot be null" in r.json()["message"]


@pytest.mark.asyncio
async def test_update_can_clear_severity(client):
    created = await _create(client, severity="Minor")
    r = await client.put(f"/api/issues/{created['id']}", json={"severity": None})
    assert r.status_code == 200
    assert "severity" not in r.json()["data"]


@pytest.mark.asyncio
async def test_update_missing_issue(client):
    r = await client.put(f"/api/issues/{uuid.uuid4()}", json={"title": "Nothing here"})
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Status transitions
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("start", ["Open", "In Progress", "Resolved", "Closed"])
async def test_resolve_from_any_status(client, start):
    created = await _create(client, status=start)
    r = await client.patch(f"/api/issues/{created['id']}/resolve")
    assert r.status_code == 200
    assert r.json()["message"] == "Issue marked as resolved"

    r = await client.get(f"/api/issues/{created['id']}")
    assert r.json()["data"]["status"] == "Resolved"


@pytest.mark.asyncio
@pytest.mark.parametrize("start", ["Open", "In Progress", "Resolved", "Closed"])
async def test_close_from_any_status(client, start):
    created = await _create(client, status=start)
    r = await client.patch(f"/api/issues/{created['id']}/close")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Closed"


@pytest.mark.asyncio
async def test_closed_issue_can_be_reopened(client, issue):
    await client.patch(f"/api/issues/{issue['id']}/close")
    r = await client.put(f"/api/issues/{issue['id']}", json={"status": "Open"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Open"


@pytest.mark.asyncio
async def test_transition_missing_issue(client):
    missing = uuid.uuid4()
    assert (await client.patch(f"/api/issues/{missing}/resolve")).status_code == 404
    assert (await client.patch(f"/api/issues/{missing}/close")).status_code == 404


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_example_lifecycle(client):
    """create → Open/High/no severity → resolve → delete → 404."""
    created = await _create(client)
    assert created["status"] == "Open"
    assert created["priority"] == "High"
    assert "severity" not in created

    r = await client.patch(f"/api/issues/{created['id']}/resolve")
    assert r.json()["data"]["status"] == "Resolved"

    r = await client.delete(f"/api/issues/{created['id']}")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["message"] == "Issue deleted successfully"

    r = await client.get(f"/api/issues/{created['id']}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_issue(client):
    r = await client.delete(f"/api/issues/{uuid.uuid4()}")
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Status counts
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_status_counts_empty(client):
    r = await client.get("/api/issues/counts")
    assert r.status_code == 200
    assert r.json()["data"] == {
        "Open": 0,
        "In Progress": 0,
        "Resolved": 0,
        "Closed": 0,
        "total": 0,
    }


@pytest.mark.asyncio
async def test_status_counts_only_count_own_issues(client, db_session):
    for status in ["Open", "Open", "In Progress", "Closed"]:
        await _create(client, status=status)

    # Someone else's issue must not be counted.
    other = User(email="other@example.com", password_hash="x")
    db_session.add(other)
    await db_session.flush()
    db_session.add(
        Issue(
            title="Not mine",
            description="Belongs to a different user",
            priority=IssuePriority.LOW,
            owner_id=other.id,
        )
    )
    await db_session.commit()

    data = (await client.get("/api/issues/counts")).json()["data"]
    assert data == {"Open": 2, "In Progress": 1, "Resolved": 0, "Closed": 1, "total": 4}
    assert sum(v for k, v in data.items() if k != "total") == data["total"]
