"""
Models module - entity records used by every service.

These models are used for:
- Internal data transfer between services and the store
- Response serialization at the HTTP boundary
"""

from internhub.models.entities import (
    Application,
    ApplicationStatus,
    Project,
    ProjectStatus,
    User,
    UserRole,
)

__all__ = [
    "Application",
    "ApplicationStatus",
    "Project",
    "ProjectStatus",
    "User",
    "UserRole",
]
