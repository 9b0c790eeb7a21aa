"""
Error taxonomy shared by all services.

Services raise these; the HTTP layer maps them to status codes in one place
(see internhub.main). Nothing here is retried.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for every expected failure of a portal operation."""

    status_code = 500
    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(PortalError):
    """Missing or malformed input. Raised before any state change."""

    status_code = 400
    code = "invalid"


class NotFoundError(PortalError):
    status_code = 404
    code = "not-found"


class AuthorizationError(PortalError):
    """Actor is not the supervisor / owner, or has the wrong role."""

    status_code = 403
    code = "forbidden"


class ConflictError(PortalError):
    """
    Duplicate pending application, transition on a non-pending application,
    or the losing side of a concurrent transition.
    """

    status_code = 409
    code = "conflict"


class InternalError(PortalError):
    """Persistence / collaborator failure, surfaced as-is."""

    status_code = 500
    code = "internal"
