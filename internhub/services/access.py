"""Role checks shared by the services."""

from internhub.core.errors import AuthorizationError
from internhub.models import User


def require_student(actor: User) -> None:
    if not actor.is_student:
        raise AuthorizationError("Students only")


def require_professor(actor: User) -> None:
    if not actor.is_professor:
        raise AuthorizationError("Professors only")
