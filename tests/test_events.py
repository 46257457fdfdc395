"""Tests for event lifecycle operations and categories."""
import uuid
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from eventphoto.db.models import Event, EventCategory


@pytest.mark.asyncio
async def test_create_event_defaults(authed_client: AsyncClient, test_org):
    response = await authed_client.post(
        "/events",
        json={"name": "  Summer Fair ", "date_start": "2026-07-04T10:00:00Z"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Summer Fair"
    assert data["status"] == "DRAFT"
    assert data["is_public"] is False
    assert data["org_id"] == str(test_org.id)
    assert data["date_end"] is None


@pytest.mark.asyncio
async def test_create_event_reports_every_invalid_field(authed_client: AsyncClient):
    submitted = {"name": " ", "date_start": "not a date", "date_end": "also bad"}

    response = await authed_client.post("/events", json=submitted)

    assert response.status_code == 422
    body = response.json()
    assert set(body["errors"]) == {"name", "date_start", "date_end"}
    assert body["values"]["date_start"] == "not a date"
    assert body["values"]["name"] == " "


@pytest.mark.asyncio
async def test_create_event_requires_start_date(authed_client: AsyncClient):
    response = await authed_client.post("/events", json={"name": "No Date"})

    assert response.status_code == 422
    assert response.json()["errors"] == {"date_start": "Start date is required"}


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(authed_client: AsyncClient, db):
    response = await authed_client.post(
        "/events",
        json={
            "name": "Backwards",
            "date_start": "2026-07-04T10:00:00Z",
            "date_end": "2026-07-03T10:00:00Z",
        },
    )

    assert response.status_code == 422
    assert "date_end" in response.json()["errors"]
    assert db.query(Event).count() == 0


@pytest.mark.asyncio
async def test_category_from_other_org_is_rejected(authed_client: AsyncClient, db, other_org_auth):
    category = EventCategory(org_id=other_org_auth.org.id, name="Weddings")
    db.add(category)
    db.commit()

    response = await authed_client.post(
        "/events",
        json={"name": "Mine", "date_start": "2026-07-04", "category_id": str(category.id)},
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"category_id": "Invalid category"}


@pytest.mark.asyncio
async def test_update_overwrites_all_fields(authed_client: AsyncClient, db, test_org):
    event = Event(
        org_id=test_org.id,
        name="Original",
        description="Keep me?",
        location_name="Hall A",
        date_start=datetime(2026, 5, 1, tzinfo=timezone.utc),
        is_public=True,
    )
    db.add(event)
    db.commit()

    response = await authed_client.put(
        f"/events/{event.id}",
        json={"name": "Renamed", "date_start": "2026-05-02T09:00:00Z", "status": "ARCHIVED"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["description"] is None
    assert data["location_name"] is None
    assert data["is_public"] is False
    assert data["status"] == "ARCHIVED"


@pytest.mark.asyncio
async def test_status_can_move_backwards(authed_client: AsyncClient, db, test_event):
    test_event.status = "COMPLETED"
    db.commit()

    response = await authed_client.put(
        f"/events/{test_event.id}",
        json={"name": "Spring Gala", "date_start": "2026-05-01T18:00:00Z", "status": "DRAFT"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "DRAFT"


@pytest.mark.asyncio
async def test_unknown_status_is_rejected(authed_client: AsyncClient, test_event):
    response = await authed_client.put(
        f"/events/{test_event.id}",
        json={"name": "Spring Gala", "date_start": "2026-05-01", "status": "CANCELLED"},
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"status": "Invalid status"}


@pytest.mark.asyncio
async def test_event_detail_includes_counts(authed_client: AsyncClient, test_event):
    await authed_client.post(
        f"/events/{test_event.id}/participants", json={"name": "Ana", "email": "ana@photos.io"}
    )

    response = await authed_client.get(f"/events/{test_event.id}")

    assert response.status_code == 200
    assert response.json()["participant_count"] == 1
    assert response.json()["photo_count"] == 0


@pytest.mark.asyncio
async def test_list_events_latest_start_first(authed_client: AsyncClient, db, test_org):
    for name, day in (("Early", 1), ("Late", 20), ("Middle", 10)):
        db.add(Event(org_id=test_org.id, name=name, date_start=datetime(2026, 3, day, tzinfo=timezone.utc)))
    db.commit()

    response = await authed_client.get("/events")

    assert [e["name"] for e in response.json()] == ["Late", "Middle", "Early"]


@pytest.mark.asyncio
async def test_delete_event_requires_confirmation(authed_client: AsyncClient, db, test_event):
    response = await authed_client.delete(f"/events/{test_event.id}")

    assert response.status_code == 400
    db.expire_all()
    assert db.get(Event, test_event.id) is not None


@pytest.mark.asyncio
async def test_delete_event(authed_client: AsyncClient, db, test_event):
    response = await authed_client.delete(f"/events/{test_event.id}", params={"confirm": "true"})

    assert response.status_code == 204
    db.expire_all()
    assert db.get(Event, test_event.id) is None


@pytest.mark.asyncio
async def test_delete_missing_event_is_404(authed_client: AsyncClient):
    response = await authed_client.delete(f"/events/{uuid.uuid4()}", params={"confirm": "true"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mutations_require_csrf_header(client_factory, test_auth):
    async with client_factory(test_auth.token, csrf=False) as c:
        response = await c.post("/events", json={"name": "X", "date_start": "2026-01-01"})
    assert response.status_code == 403


# =============================================================================
# Categories
# =============================================================================

@pytest.mark.asyncio
async def test_category_crud(authed_client: AsyncClient):
    created = await authed_client.post("/event-categories", json={"name": "Sports"})
    duplicate = await authed_client.post("/event-categories", json={"name": "Sports"})
    listed = await authed_client.get("/event-categories")

    assert created.status_code == 201
    assert duplicate.status_code == 422
    assert [c["name"] for c in listed.json()] == ["Sports"]

    deleted = await authed_client.delete(f"/event-categories/{created.json()['id']}")
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_same_category_name_allowed_in_two_orgs(authed_client: AsyncClient, db, other_org_auth):
    db.add(EventCategory(org_id=other_org_auth.org.id, name="Sports"))
    db.commit()

    response = await authed_client.post("/event-categories", json={"name": "Sports"})

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_other_org_cannot_delete_category(client_factory, other_org_auth, db, test_org):
    category = EventCategory(org_id=test_org.id, name="Mine")
    db.add(category)
    db.commit()

    async with client_factory(other_org_auth.token) as c:
        response = await c.delete(f"/event-categories/{category.id}")

    assert response.status_code == 404
    db.expire_all()
    assert db.get(EventCategory, category.id) is not None
