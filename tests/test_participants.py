"""Tests for participant operations."""
import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError

from eventphoto.core.exceptions import DuplicateEmail
from eventphoto.db.models import Event, Participant
from eventphoto.schemas.participant import ParticipantForm
from eventphoto.services import participant_service


@pytest.mark.asyncio
async def test_create_participant_normalizes_email_and_applies_defaults(
    authed_client: AsyncClient, test_event
):
    response = await authed_client.post(
        f"/events/{test_event.id}/participants",
        json={"name": "Ana Lima", "email": "  Ana.Lima@Photos.IO "},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "ana.lima@photos.io"
    assert data["registration_status"] == "Invited"
    assert data["consent_status"] is False


@pytest.mark.asyncio
async def test_caller_can_override_defaults(authed_client: AsyncClient, test_event):
    response = await authed_client.post(
        f"/events/{test_event.id}/participants",
        json={
            "name": "Bo",
            "email": "bo@photos.io",
            "registration_status": "Confirmed",
            "consent_status": True,
        },
    )

    assert response.status_code == 201
    assert response.json()["registration_status"] == "Confirmed"
    assert response.json()["consent_status"] is True


@pytest.mark.asyncio
async def test_submitted_user_link_is_ignored(authed_client: AsyncClient, db, test_event, user_factory):
    url = f"/events/{test_event.id}/participants"
    someone = user_factory()

    linked = await authed_client.post(url, json={"name": "Ana", "email": "ana@photos.io", "user_id": str(someone.id)})
    unknown = await authed_client.post(
        url, json={"name": "Bo", "email": "bo@photos.io", "user_id": "00000000-0000-0000-0000-000000000000"}
    )

    assert linked.status_code == unknown.status_code == 201
    assert linked.json()["user_id"] is None
    assert unknown.json()["user_id"] is None
    assert db.query(Participant).filter(Participant.user_id == someone.id).count() == 0


@pytest.mark.asyncio
async def test_duplicate_email_in_same_event_conflicts(authed_client: AsyncClient, db, test_event):
    url = f"/events/{test_event.id}/participants"
    first = await authed_client.post(url, json={"name": "Ana", "email": "ana@photos.io"})
    second = await authed_client.post(url, json={"name": "Ana Again", "email": "ANA@photos.io"})

    assert first.status_code == 201
    assert second.status_code == 409
    body = second.json()
    assert "email" in body["errors"]
    assert body["values"]["name"] == "Ana Again"
    assert db.query(Participant).filter(Participant.event_id == test_event.id).count() == 1


@pytest.mark.asyncio
async def test_same_email_allowed_in_another_event(authed_client: AsyncClient, db, test_org, test_event):
    other_event = Event(org_id=test_org.id, name="Other", date_start=test_event.date_start)
    db.add(other_event)
    db.commit()

    first = await authed_client.post(
        f"/events/{test_event.id}/participants", json={"name": "Ana", "email": "ana@photos.io"}
    )
    second = await authed_client.post(
        f"/events/{other_event.id}/participants", json={"name": "Ana", "email": "ana@photos.io"}
    )

    assert first.status_code == 201
    assert second.status_code == 201


@pytest.mark.asyncio
async def test_invalid_participant_input(authed_client: AsyncClient, test_event):
    response = await authed_client.post(
        f"/events/{test_event.id}/participants", json={"name": "", "email": "not-an-email"}
    )

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"name", "email"}


def test_store_rejects_duplicate_email_without_service(db, test_event):
    db.add(Participant(event_id=test_event.id, name="A", email="dup@photos.io"))
    db.commit()
    db.add(Participant(event_id=test_event.id, name="B", email="dup@photos.io"))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_constraint_violation_surfaces_as_duplicate_email(db, test_org, test_event):
    """No pre-check runs; the unique constraint is what rejects the second row."""
    db.add(Participant(event_id=test_event.id, name="Racer", email="race@photos.io"))
    db.commit()

    with pytest.raises(DuplicateEmail) as exc_info:
        participant_service.create_participant(
            db,
            test_org.id,
            test_event.id,
            ParticipantForm(name="Racer Two", email="race@photos.io"),
        )
    assert exc_info.value.errors == {"email": DuplicateEmail.default_message}


@pytest.mark.asyncio
async def test_update_participant(authed_client: AsyncClient, test_event):
    created = await authed_client.post(
        f"/events/{test_event.id}/participants", json={"name": "Ana", "email": "ana@photos.io"}
    )
    participant_id = created.json()["id"]

    response = await authed_client.patch(
        f"/events/{test_event.id}/participants/{participant_id}",
        json={"registration_status": "Attended", "email": "ANA.NEW@photos.io"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["registration_status"] == "Attended"
    assert data["email"] == "ana.new@photos.io"
    assert data["name"] == "Ana"


@pytest.mark.asyncio
async def test_update_to_taken_email_conflicts(authed_client: AsyncClient, test_event):
    url = f"/events/{test_event.id}/participants"
    await authed_client.post(url, json={"name": "Ana", "email": "ana@photos.io"})
    bo = await authed_client.post(url, json={"name": "Bo", "email": "bo@photos.io"})

    response = await authed_client.patch(f"{url}/{bo.json()['id']}", json={"email": "ana@photos.io"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_participant(authed_client: AsyncClient, db, test_event):
    created = await authed_client.post(
        f"/events/{test_event.id}/participants", json={"name": "Ana", "email": "ana@photos.io"}
    )

    response = await authed_client.delete(
        f"/events/{test_event.id}/participants/{created.json()['id']}"
    )
    listed = await authed_client.get(f"/events/{test_event.id}/participants")

    assert response.status_code == 204
    assert listed.json() == []
