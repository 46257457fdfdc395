"""Organization service - tenant creation and removal."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from eventphoto.core.exceptions import NotFound, PreconditionFailed
from eventphoto.db.enums import Role
from eventphoto.db.models import Organization, User
from eventphoto.services import membership_service

logger = logging.getLogger(__name__)


def get_org(db: Session, org_id: UUID) -> Organization | None:
    return db.get(Organization, org_id)


def get_org_by_stripe_customer(db: Session, customer_id: str) -> Organization | None:
    return (
        db.query(Organization)
        .filter(Organization.stripe_customer_id == customer_id)
        .first()
    )


def create_org(db: Session, name: str, creator: User) -> Organization:
    """
    Create an organization with the creator as its first member.

    Only users without any membership may create one; the new organization
    then becomes their oldest membership, so promoting an INDIVIDUAL_USER
    to ORGANIZATION_ADMIN grants admin rights in that organization alone.

    Raises:
        PreconditionFailed: Creator already belongs to an organization
    """
    if membership_service.get_org_ids_for_user(db, creator.id):
        raise PreconditionFailed("User already belongs to an organization")

    org = Organization(name=name.strip())
    db.add(org)
    db.flush()

    membership_service.add_member(db, org.id, creator.id, commit=False)
    if creator.role == Role.INDIVIDUAL_USER.value:
        creator.role = Role.ORGANIZATION_ADMIN.value

    db.commit()
    db.refresh(org)
    logger.info("Organization created", extra={"org_id": str(org.id)})
    return org


def add_member_by_email(db: Session, org_id: UUID, email: str):
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        raise NotFound("User not found")
    return membership_service.add_member(db, org_id, user.id)


def delete_org(db: Session, org_id: UUID) -> None:
    """Remove an organization; the store cascades every tenant row."""
    org = get_org(db, org_id)
    if not org:
        raise NotFound("Organization not found")
    db.delete(org)
    db.commit()
    logger.info("Organization deleted", extra={"org_id": str(org_id)})
