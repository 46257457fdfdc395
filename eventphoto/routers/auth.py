"""Authentication endpoints: password login, logout, current user."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from eventphoto.core.config import settings
from eventphoto.core.deps import get_current_session, get_db, require_csrf_header
from eventphoto.core.rate_limit import limiter
from eventphoto.core.security import clear_session_cookie, create_session_token, set_session_cookie
from eventphoto.core.structured_logging import build_log_context
from eventphoto.db.models import Organization, User
from eventphoto.schemas.auth import LoginRequest, MeResponse, UserSession
from eventphoto.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", dependencies=[Depends(require_csrf_header)])
@limiter.limit(f"{settings.RATE_LIMIT_LOGIN}/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Exchange email and password for a session cookie.

    Unknown email, wrong password and disabled accounts all return the same 401.
    """
    user = auth_service.verify_credentials(db, body.email, body.password)
    token = create_session_token(user.id, user.token_version)
    set_session_cookie(response, token)
    logger.info(
        "User logged in",
        extra=build_log_context(user_id=user.id, route="/auth/login", method="POST"),
    )
    return {"status": "logged_in", "user_id": str(user.id)}


@router.post("/logout", dependencies=[Depends(require_csrf_header)])
def logout(response: Response):
    """Clear the session cookie. Sessions are stateless, nothing is stored."""
    clear_session_cookie(response)
    return {"status": "logged_out"}


@router.get("/me")
def get_me(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> MeResponse:
    """Current user, resolved organization and role."""
    user = db.get(User, session.user_id)
    org = db.get(Organization, session.org_id)
    return MeResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=session.role,
        org_id=org.id,
        org_name=org.name,
    )
