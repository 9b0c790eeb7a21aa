"""
Project Catalog Service

Plain project CRUD for supervisors, the public listing with filters and
portal-wide project statistics.
Membership arrays (applicants / interns) are never written here; see
ApplicationLifecycleManager.
"""

import re
from typing import List, Optional, Tuple

from internhub.core.config import Settings, get_settings
from internhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from internhub.models import Project, ProjectStatus, User
from internhub.schemas.schemas import FieldCount, ProjectCreate, ProjectStats, ProjectUpdate
from internhub.services.access import require_professor
from internhub.utils.logging import get_logger

logger = get_logger(__name__)


def build_project_query(
    department: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[ProjectStatus] = None,
    skills: Optional[List[str]] = None,
    search: Optional[str] = None,
) -> dict:
    """
    MongoDB filter for the project listing.

    `skills` matches projects requiring any of them; `search` is a
    case-insensitive substring over title, description and category.
    """
    query: dict = {}
    if department:
        query["department"] = department
    if category:
        query["category"] = category
    if status:
        query["status"] = ProjectStatus(status).value
    skills = [s.strip() for s in (skills or []) if s and s.strip()]
    if skills:
        query["required_skills"] = {"$in": skills}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}, {"category": pattern}]
    return query


class ProjectCatalog:
    def __init__(self, store, settings: Settings = None):
        self.store = store
        self.settings = settings or get_settings()

    def _owned(self, professor: User, project_id: str) -> Project:
        require_professor(professor)
        project = self.get(project_id)
        if not project.is_supervised_by(professor):
            raise AuthorizationError("Not authorized to modify this project")
        return project

    def create(self, professor: User, data: ProjectCreate) -> Project:
        require_professor(professor)
        fields = data.model_dump()
        fields["max_interns"] = data.max_interns or self.settings.default_max_interns
        fields["supervisor_id"] = professor.id
        project = self.store.projects.insert(fields)
        logger.info("project_created", project_id=project.id, supervisor_id=professor.id)
        return project

    def get(self, project_id: str) -> Project:
        project = self.store.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def list(
        self,
        page: int = 1,
        page_size: int = 10,
        **filters,
    ) -> Tuple[List[Project], int]:
        """One page of matching projects (newest first) and the total count."""
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")
        query = build_project_query(**filters)
        projects = self.store.projects.find(query, skip=(page - 1) * page_size, limit=page_size)
        return projects, self.store.projects.count(query)

    def list_mine(self, professor: User) -> List[Project]:
        require_professor(professor)
        return self.store.projects.find_by_supervisor(professor.id)

    def update(self, professor: User, project_id: str, data: ProjectUpdate) -> Project:
        self._owned(professor, project_id)
        fields = data.model_dump(exclude_none=True)
        if "status" in fields:
            fields["status"] = ProjectStatus(fields["status"]).value
        if not fields:
            raise ValidationError("No fields to update")

        project = self.store.projects.update_fields(project_id, fields)
        if project is None:
            raise NotFoundError("Project not found")
        logger.info("project_updated", project_id=project_id, fields=sorted(fields))
        return project

    def delete(self, professor: User, project_id: str) -> None:
        self._owned(professor, project_id)
        if not self.store.projects.delete(project_id):
            raise NotFoundError("Project not found")
        logger.info("project_deleted", project_id=project_id, supervisor_id=professor.id)

    def stats(self, top_skills: int = 10) -> ProjectStats:
        """Portal-wide project counts, plus the most requested skills."""
        projects = self.store.projects
        by_status = {s.value: 0 for s in ProjectStatus}
        by_status.update(projects.count_by("status"))

        def counts(field, **kwargs):
            return [FieldCount(value=v, count=n) for v, n in projects.count_by(field, **kwargs)]

        return ProjectStats(
            total=projects.count(),
            by_status=by_status,
            by_category=counts("category"),
            by_department=counts("department"),
            top_skills=counts("required_skills", unwind=True, limit=top_skills),
        )
