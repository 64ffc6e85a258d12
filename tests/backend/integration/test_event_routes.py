"""
Integration tests for /api/v1/events: lifecycle, membership and admin rights.
"""
import pytest

from app.models.event import Event


pytestmark = pytest.mark.asyncio

EVENTS = "/api/v1/events"
EVENT_BODY = {
    "name": "Hiking",
    "description": "Saturday loop",
    "startDate": "2030-06-01T08:00:00Z",
    "endDate": "2030-06-01T16:00:00Z",
}


async def _create(client, headers, **overrides):
    resp = await client.post(EVENTS, json={**EVENT_BODY, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_create_event(client, logged_in):
    user, headers = await logged_in()
    data = await _create(client, headers)

    assert data["name"] == "Hiking"
    assert data["participants"] == [str(user.id)]
    assert data["admins"] == []
    assert len(data["eventCode"]) == 10

    mine = await client.get("/api/v1/users/events", headers=headers)
    assert [e["id"] for e in mine.json()["data"]] == [data["id"]]


async def test_create_event_validation(client, logged_in):
    _, headers = await logged_in()
    missing = await client.post(EVENTS, json={"name": "No dates"}, headers=headers)
    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "MISSING_FIELDS"

    backwards = await client.post(
        EVENTS,
        json={**EVENT_BODY, "startDate": EVENT_BODY["endDate"], "endDate": EVENT_BODY["startDate"]},
        headers=headers,
    )
    assert backwards.status_code == 400
    assert backwards.json()["error"]["code"] == "INVALID_DATE_RANGE"


async def test_join_by_code_and_view(client, logged_in):
    _, owner_headers = await logged_in()
    guest, guest_headers = await logged_in()
    event = await _create(client, owner_headers)

    joined = await client.post(f"{EVENTS}/join/{event['eventCode']}", headers=guest_headers)
    assert joined.status_code == 200
    assert str(guest.id) in joined.json()["data"]["participants"]

    view = await client.get(f"{EVENTS}/{event['id']}", headers=guest_headers)
    assert view.status_code == 200
    assert view.json()["data"]["canEdit"] is True

    bad = await client.post(f"{EVENTS}/join/WRONGCODE1", headers=guest_headers)
    assert bad.status_code == 404
    assert bad.json()["error"]["code"] == "EVENT_NOT_FOUND"


async def test_non_participant_cannot_view(client, logged_in):
    _, owner_headers = await logged_in()
    _, stranger_headers = await logged_in()
    event = await _create(client, owner_headers)

    resp = await client.get(f"{EVENTS}/{event['id']}", headers=stranger_headers)
    assert resp.status_code == 403

    unknown = await client.get(f"{EVENTS}/not-an-id", headers=stranger_headers)
    assert unknown.status_code == 404


async def test_update_event_respects_admin_lock(client, logged_in):
    owner, owner_headers = await logged_in()
    _, guest_headers = await logged_in()
    event = await _create(client, owner_headers)
    await client.post(f"{EVENTS}/join/{event['eventCode']}", headers=guest_headers)

    # unlocked: any participant may edit
    resp = await client.patch(f"{EVENTS}/{event['id']}", json={"name": "Renamed"}, headers=guest_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Renamed"

    lock = await client.post(f"{EVENTS}/{event['id']}/admins/{owner.id}", headers=owner_headers)
    assert lock.json()["data"]["admins"] == [str(owner.id)]

    denied = await client.patch(f"{EVENTS}/{event['id']}", json={"name": "Again"}, headers=guest_headers)
    assert denied.status_code == 403
    assert denied.json()["error"]["code"] == "FORBIDDEN"

    view = await client.get(f"{EVENTS}/{event['id']}", headers=guest_headers)
    assert view.json()["data"]["canEdit"] is False


async def test_regenerate_event_code(client, logged_in):
    _, headers = await logged_in()
    event = await _create(client, headers)
    resp = await client.post(f"{EVENTS}/{event['id']}/code", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["eventCode"] != event["eventCode"]


async def test_last_participant_leaving_deletes_event(client, logged_in):
    _, owner_headers = await logged_in()
    _, guest_headers = await logged_in()
    event = await _create(client, owner_headers)
    await client.post(f"{EVENTS}/join/{event['eventCode']}", headers=guest_headers)

    first = await client.delete(f"{EVENTS}/{event['id']}/participants/me", headers=guest_headers)
    assert first.json()["data"]["eventDeleted"] is False
    assert await Event.exists(id=event["id"])

    last = await client.delete(f"{EVENTS}/{event['id']}/participants/me", headers=owner_headers)
    assert last.json()["data"]["eventDeleted"] is True
    assert not await Event.exists(id=event["id"])


async def test_kick_participant(client, logged_in):
    _, owner_headers = await logged_in()
    guest, guest_headers = await logged_in()
    event = await _create(client, owner_headers)
    await client.post(f"{EVENTS}/join/{event['eventCode']}", headers=guest_headers)

    resp = await client.delete(f"{EVENTS}/{event['id']}/participants/{guest.id}", headers=owner_headers)
    assert resp.status_code == 200

    mine = await client.get("/api/v1/users/events", headers=guest_headers)
    assert mine.json()["data"] == []


async def test_delete_event_removes_it_from_everyone(client, logged_in):
    _, owner_headers = await logged_in()
    _, guest_headers = await logged_in()
    event = await _create(client, owner_headers)
    await client.post(f"{EVENTS}/join/{event['eventCode']}", headers=guest_headers)

    resp = await client.delete(f"{EVENTS}/{event['id']}", headers=owner_headers)
    assert resp.status_code == 200
    assert not await Event.exists(id=event["id"])
    for headers in (owner_headers, guest_headers):
        mine = await client.get("/api/v1/users/events", headers=headers)
        assert mine.json()["data"] == []


async def test_deleting_sole_participant_account_deletes_event(client, logged_in):
    _, headers = await logged_in()
    event = await _create(client, headers)

    await client.delete("/api/v1/users/me", headers=headers)

    assert not await Event.exists(id=event["id"])
