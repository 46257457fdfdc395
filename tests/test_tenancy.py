"""
Tenant isolation tests.

Another organization's rows must be indistinguishable from rows that do
not exist, for reads and for writes.
"""
import uuid
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from eventphoto.core.exceptions import NotAssociated
from eventphoto.db.enums import Role
from eventphoto.db.models import Event, EventPhoto, Organization, OrganizationUser, Participant
from eventphoto.services import membership_service


@pytest.fixture
def populated_event(db, test_event, test_user):
    participant = Participant(event_id=test_event.id, name="Ana", email="ana@photos.io")
    photo = EventPhoto(
        event_id=test_event.id,
        uploader_user_id=test_user.id,
        image_url="memory://events/x/photos/a.jpg",
    )
    db.add_all([participant, photo])
    db.commit()
    return test_event, participant, photo


@pytest.mark.asyncio
async def test_other_org_sees_event_as_missing(client_factory, other_org_auth, test_event):
    async with client_factory(other_org_auth.token) as c:
        foreign = await c.get(f"/events/{test_event.id}")
        missing = await c.get(f"/events/{uuid.uuid4()}")

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


@pytest.mark.asyncio
async def test_other_org_cannot_modify_event(client_factory, other_org_auth, db, test_event):
    async with client_factory(other_org_auth.token) as c:
        update = await c.put(
            f"/events/{test_event.id}",
            json={"name": "Hijacked", "date_start": "2026-05-01T18:00:00Z"},
        )
        delete = await c.delete(f"/events/{test_event.id}", params={"confirm": "true"})

    assert update.status_code == 404
    assert delete.status_code == 404
    db.expire_all()
    assert db.get(Event, test_event.id).name == "Spring Gala"


@pytest.mark.asyncio
async def test_other_org_cannot_reach_nested_rows(client_factory, other_org_auth, populated_event):
    event, participant, photo = populated_event

    async with client_factory(other_org_auth.token) as c:
        responses = [
            await c.get(f"/events/{event.id}/participants"),
            await c.get(f"/events/{event.id}/participants/{participant.id}"),
            await c.patch(f"/events/{event.id}/participants/{participant.id}", json={"name": "X"}),
            await c.delete(f"/events/{event.id}/participants/{participant.id}"),
            await c.get(f"/events/{event.id}/photos"),
            await c.delete(f"/events/{event.id}/photos/{photo.id}", params={"confirm": "true"}),
            await c.post(
                f"/events/{event.id}/photos/{photo.id}/review", json={"review_status": "APPROVED"}
            ),
            await c.post(f"/events/{event.id}/face-matching"),
            await c.get(f"/events/{event.id}/matches"),
        ]

    assert [r.status_code for r in responses] == [404] * len(responses)


@pytest.mark.asyncio
async def test_nested_row_under_wrong_event_is_missing(authed_client: AsyncClient, db, test_org, populated_event):
    _, participant, photo = populated_event
    sibling = Event(
        org_id=test_org.id,
        name="Sibling",
        date_start=datetime(2026, 6, 1, tzinfo=timezone.utc),
    )
    db.add(sibling)
    db.commit()

    participant_response = await authed_client.get(
        f"/events/{sibling.id}/participants/{participant.id}"
    )
    photo_response = await authed_client.delete(
        f"/events/{sibling.id}/photos/{photo.id}", params={"confirm": "true"}
    )

    assert participant_response.status_code == 404
    assert photo_response.status_code == 404


@pytest.mark.asyncio
async def test_list_only_shows_own_events(authed_client: AsyncClient, db, other_org_auth, test_event):
    db.add(
        Event(
            org_id=other_org_auth.org.id,
            name="Their Event",
            date_start=datetime(2026, 7, 1, tzinfo=timezone.utc),
        )
    )
    db.commit()

    response = await authed_client.get("/events")

    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Spring Gala"]


@pytest.mark.asyncio
async def test_viewer_can_read_but_not_write(client_factory, user_factory, auth_factory, test_org, test_event):
    viewer = user_factory(test_org, Role.ORGANIZATION_VIEWER)
    auth = auth_factory(viewer, test_org)

    async with client_factory(auth.token) as c:
        read = await c.get(f"/events/{test_event.id}")
        create = await c.post("/events", json={"name": "New", "date_start": "2026-05-01"})
        delete = await c.delete(f"/events/{test_event.id}", params={"confirm": "true"})

    assert read.status_code == 200
    assert create.status_code == 403
    assert delete.status_code == 403


@pytest.mark.asyncio
async def test_viewer_of_other_org_gets_404_not_403(client_factory, user_factory, auth_factory, db, test_event):
    org = Organization(name="Viewers Inc")
    db.add(org)
    db.commit()
    viewer = user_factory(org, Role.ORGANIZATION_VIEWER)
    auth = auth_factory(viewer, org)

    async with client_factory(auth.token) as c:
        read = await c.get(f"/events/{test_event.id}")

    assert read.status_code == 404


def test_resolve_org_id_uses_oldest_membership(db, test_user, test_org):
    second = Organization(name="Second")
    db.add(second)
    db.flush()
    db.add(
        OrganizationUser(
            user_id=test_user.id,
            org_id=second.id,
            created_at=datetime(2999, 1, 1, tzinfo=timezone.utc),
        )
    )
    db.commit()

    assert membership_service.resolve_org_id(db, test_user.id) == test_org.id
    assert membership_service.get_org_ids_for_user(db, test_user.id) == [test_org.id, second.id]


def test_resolve_org_id_without_membership_raises(db, user_factory):
    user = user_factory()
    with pytest.raises(NotAssociated):
        membership_service.resolve_org_id(db, user.id)


@pytest.mark.asyncio
async def test_member_cannot_gain_admin_by_creating_an_organization(
    client_factory, user_factory, auth_factory, db, test_org, test_event
):
    attendee = user_factory(test_org, Role.INDIVIDUAL_USER)
    auth = auth_factory(attendee, test_org)

    async with client_factory(auth.token) as c:
        before = await c.delete(f"/events/{test_event.id}", params={"confirm": "true"})
        created = await c.post("/organizations", json={"name": "Side Door"})
        after = await c.delete(f"/events/{test_event.id}", params={"confirm": "true"})

    assert before.status_code == 403
    assert created.status_code == 400
    assert after.status_code == 403
    db.refresh(attendee)
    assert attendee.role == Role.INDIVIDUAL_USER.value
    assert db.get(Event, test_event.id) is not None
    assert db.query(Organization).filter(Organization.name == "Side Door").count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "role,expected",
    [(Role.INDIVIDUAL_USER, 403), (Role.ORGANIZATION_VIEWER, 200)],
)
async def test_reads_require_an_organization_role(
    client_factory, user_factory, auth_factory, test_org, populated_event, role, expected
):
    event, participant, photo = populated_event
    member = user_factory(test_org, role)
    auth = auth_factory(member, test_org)

    async with client_factory(auth.token) as c:
        responses = [
            await c.get("/events"),
            await c.get(f"/events/{event.id}"),
            await c.get("/event-categories"),
            await c.get(f"/events/{event.id}/participants"),
            await c.get(f"/events/{event.id}/participants/{participant.id}"),
            await c.get(f"/events/{event.id}/photos"),
            await c.get(f"/events/{event.id}/photos/{photo.id}"),
            await c.get(f"/events/{event.id}/matches"),
        ]

    assert [r.status_code for r in responses] == [expected] * len(responses)
