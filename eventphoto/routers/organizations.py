"""Organization endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventphoto.core.deps import get_current_user, get_db, require_admin, require_csrf_header
from eventphoto.db.models import User
from eventphoto.schemas.auth import MemberAdd, OrganizationCreate, OrganizationRead, UserSession
from eventphoto.services import org_service

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post(
    "",
    response_model=OrganizationRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_organization(
    body: OrganizationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create an organization; the caller becomes its admin member."""
    return org_service.create_org(db, body.name, user)


@router.post("/members", status_code=201, dependencies=[Depends(require_csrf_header)])
def add_member(
    body: MemberAdd,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_admin),
):
    membership = org_service.add_member_by_email(db, session.org_id, body.email)
    return {"user_id": str(membership.user_id), "org_id": str(membership.org_id)}
