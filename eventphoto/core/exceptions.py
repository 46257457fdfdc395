"""
Domain errors raised by services and rendered by a single handler in main.py.

Each error carries the HTTP status it maps to. Routers never catch these.
"""

from typing import Any


class DomainError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message}


class Unauthorized(DomainError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthorized):
    """Unknown email, wrong password and disabled account all look the same."""

    default_message = "Invalid login credentials."


class NotAssociated(DomainError):
    status_code = 403
    default_message = "User is not associated with an organization"


class Forbidden(DomainError):
    status_code = 403
    default_message = "Not authorized for this action"


class NotFound(DomainError):
    """Raised for missing rows and for rows owned by another organization."""

    status_code = 404
    default_message = "Not found"


class ValidationFailed(DomainError):
    """
    Input rejected by a lifecycle operation.

    `errors` maps field name to message; `values` echoes what was submitted
    so a client can re-render its form.
    """

    status_code = 422
    default_message = "Validation failed"

    def __init__(
        self,
        errors: dict[str, str],
        values: dict[str, Any] | None = None,
        message: str | None = None,
    ):
        super().__init__(message)
        self.errors = errors
        self.values = values or {}

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "errors": self.errors, "values": self.values}


class DuplicateEmail(ValidationFailed):
    status_code = 409
    default_message = "A participant with this email already exists for this event"

    def __init__(self, values: dict[str, Any] | None = None):
        super().__init__(errors={"email": self.default_message}, values=values)


class DuplicateMembership(DomainError):
    status_code = 409
    default_message = "User is already a member of this organization"


class PreconditionFailed(DomainError):
    status_code = 400
    default_message = "Precondition failed"


class InvalidTransition(PreconditionFailed):
    status_code = 409

    def __init__(self, entity: str, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from {current} to {target}")


class UpstreamFailure(DomainError):
    """Storage or compute backend call failed."""

    status_code = 502
    default_message = "Upstream service unavailable. Please try again."
