"""
Credential verification and account helpers.

verify_credentials is the CredentialVerifier; cookie/session handling is
in core.security.
"""

import logging

from sqlalchemy.orm import Session

from eventphoto.core.exceptions import InvalidCredentials
from eventphoto.core.security import hash_password, verify_password
from eventphoto.db.models import User
from eventphoto.utils.normalization import normalize_email

logger = logging.getLogger(__name__)

# Checked against unknown emails so both failure paths cost one bcrypt round
_DUMMY_HASH = hash_password("not-a-real-password")


def get_user_by_email(db: Session, email: str) -> User | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    return db.query(User).filter(User.email == normalized).first()


def verify_credentials(db: Session, email: str, password: str) -> User:
    """
    Return the user for a valid email/password pair.

    Raises:
        InvalidCredentials: unknown email, wrong password or disabled account
    """
    user = get_user_by_email(db, email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash) or not user.is_active:
        raise InvalidCredentials()
    return user


def revoke_sessions(db: Session, user: User) -> None:
    """Invalidate every outstanding session cookie for the user."""
    user.token_version += 1
    db.commit()
    logger.info("Sessions revoked", extra={"user_id": str(user.id)})
