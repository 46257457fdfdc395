"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator
from uuid import UUID

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from eventphoto.core.exceptions import Forbidden, Unauthorized
from eventphoto.core.security import COOKIE_NAME, decode_session_token
from eventphoto.db.enums import (
    ROLES_CAN_MANAGE_EVENTS,
    ROLES_CAN_MANAGE_ORG,
    ROLES_CAN_VIEW_EVENTS,
    Role,
)
from eventphoto.db.models import User
from eventphoto.db.session import SessionLocal
from eventphoto.schemas.auth import UserSession
from eventphoto.services import compute_service, membership_service, storage_service

CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Get authenticated user from session cookie.

    Validates:
    - Session cookie exists
    - JWT is valid and not expired
    - User exists and is active
    - Token version matches (for revocation support)

    Raises:
        Unauthorized: Authentication failed
    """
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise Unauthorized("Not authenticated")

    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid session")

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid session")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise Unauthorized("Invalid session")

    if user.token_version != payload.get("token_version"):
        raise Unauthorized("Session revoked")

    return user


def get_current_session(request: Request, db: Session = Depends(get_db)) -> UserSession:
    """
    Get full session context: user, resolved organization, role.

    This is the PRIMARY auth dependency for tenant-scoped endpoints.

    Raises:
        Unauthorized: Not authenticated
        NotAssociated: User has no organization membership
        Forbidden: Role is not an organization role
    """
    user = get_current_user(request, db)
    org_id = membership_service.resolve_org_id(db, user.id)

    if not Role.has_value(user.role):
        raise Forbidden(f"Unknown role '{user.role}'. Contact administrator.")

    return UserSession(
        user_id=user.id,
        org_id=org_id,
        role=Role(user.role),
        email=user.email,
        display_name=user.display_name,
    )


def require_roles(allowed_roles: set[Role]):
    """
    Dependency factory for role-based authorization.

    Runs after tenancy resolution, so a 403 here never reveals anything
    about another organization's data.

    Usage:
        session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_EVENTS))
    """

    def dependency(session: UserSession = Depends(get_current_session)) -> UserSession:
        if session.role not in allowed_roles:
            raise Forbidden(f"Role '{session.role.value}' not authorized for this action")
        return session

    return dependency


require_viewer = require_roles(ROLES_CAN_VIEW_EVENTS)
require_editor = require_roles(ROLES_CAN_MANAGE_EVENTS)
require_admin = require_roles(ROLES_CAN_MANAGE_ORG)


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PUT, PATCH, DELETE).

    Raises:
        Forbidden: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise Forbidden(f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'")


def get_storage() -> storage_service.StorageBackend:
    return storage_service.get_storage_backend()


def get_compute() -> compute_service.ComputeTrigger:
    return compute_service.get_compute_trigger()
