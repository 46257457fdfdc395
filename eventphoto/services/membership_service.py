"""Membership service - tenancy resolution through organization_users."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventphoto.core.exceptions import DuplicateMembership, NotAssociated
from eventphoto.db.models import OrganizationUser

logger = logging.getLogger(__name__)


def get_org_ids_for_user(db: Session, user_id: UUID) -> list[UUID]:
    """All organizations the user belongs to, oldest membership first."""
    rows = (
        db.query(OrganizationUser.org_id)
        .filter(OrganizationUser.user_id == user_id)
        .order_by(OrganizationUser.created_at.asc(), OrganizationUser.id.asc())
        .all()
    )
    return [row.org_id for row in rows]


def resolve_org_id(db: Session, user_id: UUID) -> UUID:
    """
    Organization used to scope this user's requests.

    Raises:
        NotAssociated: the user has no membership
    """
    org_ids = get_org_ids_for_user(db, user_id)
    if not org_ids:
        raise NotAssociated()
    return org_ids[0]


def add_member(db: Session, org_id: UUID, user_id: UUID, *, commit: bool = True) -> OrganizationUser:
    """
    Link a user to an organization.

    Raises:
        DuplicateMembership: the pair already exists (store constraint)
    """
    membership = OrganizationUser(org_id=org_id, user_id=user_id)
    db.add(membership)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateMembership()
    if commit:
        db.commit()
    logger.info("Member added to organization %s", org_id)
    return membership
