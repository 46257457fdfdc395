"""Consent endpoints. Scoped to the calling user, not the organization."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from eventphoto.core.deps import get_current_user, get_db, require_csrf_header
from eventphoto.db.models import User
from eventphoto.schemas.consent import ConsentCreate, ConsentRead
from eventphoto.services import consent_service

router = APIRouter(prefix="/consent", tags=["consent"])


@router.post(
    "",
    response_model=ConsentRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def record_consent(
    request: Request,
    body: ConsentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # The consent record itself keeps where the decision was made
    client_ip = request.client.host if request.client else None
    details = "; ".join(part for part in (body.details, f"ip={client_ip}" if client_ip else None) if part)
    return consent_service.record_consent(db, user.id, body, details=details or None)


@router.get("", response_model=list[ConsentRead])
def list_consent(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return consent_service.list_consents(db, user.id)
