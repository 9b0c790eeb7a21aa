"""
Project Routes

POST /projects - Create project (professor only)
GET /projects - List projects with filters
GET /projects/mine - My supervised projects (professor only)
GET /projects/stats/overview - Counts by status, category, department; top skills
GET /projects/{project_id} - Get project details
PUT /projects/{project_id} - Update project (supervisor only)
DELETE /projects/{project_id} - Delete project (supervisor only)
POST /projects/{project_id}/apply - Join the applicant list (student only)
POST /projects/{project_id}/rebuild - Recompute applicants / interns (supervisor only)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from internhub.api.dependencies import get_lifecycle_manager, get_project_catalog
from internhub.core.auth import get_current_professor, get_current_student
from internhub.models import Project, ProjectStatus, User
from internhub.services.application_service import ApplicationLifecycleManager
from internhub.services.project_service import ProjectCatalog
from internhub.schemas.schemas import (
    ProjectCreate, ProjectUpdate, ProjectListResponse, ProjectStats, MessageResponse
)

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("", response_model=Project, status_code=201)
async def create_project(
    data: ProjectCreate,
    professor: User = Depends(get_current_professor),
    catalog: ProjectCatalog = Depends(get_project_catalog)
):
    return catalog.create(professor, data)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    department: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[ProjectStatus] = Query(None),
    skills: Optional[str] = Query(None, description="Comma-separated, matches any"),
    search: Optional[str] = Query(None, description="Search in title, description, category"),
    catalog: ProjectCatalog = Depends(get_project_catalog)
):
    """List projects with filters and pagination, newest first."""
    projects, total = catalog.list(
        page=page,
        page_size=page_size,
        department=department,
        category=category,
        status=status,
        skills=skills.split(",") if skills else None,
        search=search,
    )
    return ProjectListResponse(projects=projects, total=total, page=page, page_size=page_size)


@router.get("/mine", response_model=List[Project])
async def my_projects(
    professor: User = Depends(get_current_professor),
    catalog: ProjectCatalog = Depends(get_project_catalog)
):
    return catalog.list_mine(professor)


@router.get("/stats/overview", response_model=ProjectStats)
async def project_stats(catalog: ProjectCatalog = Depends(get_project_catalog)):
    return catalog.stats()


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, catalog: ProjectCatalog = Depends(get_project_catalog)):
    return catalog.get(project_id)


@router.put("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    professor: User = Depends(get_current_professor),
    catalog: ProjectCatalog = Depends(get_project_catalog)
):
    return catalog.update(professor, project_id, data)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    professor: User = Depends(get_current_professor),
    catalog: ProjectCatalog = Depends(get_project_catalog)
):
    catalog.delete(professor, project_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/apply", response_model=Project)
async def apply_to_project(
    project_id: str,
    student: User = Depends(get_current_student),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """Add the caller to the applicant list of an open project."""
    return manager.apply_to_project(student, project_id)


@router.post("/{project_id}/rebuild", response_model=Project)
async def rebuild_project_sets(
    project_id: str,
    professor: User = Depends(get_current_professor),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """Recompute applicants and interns from the project's applications."""
    return manager.rebuild_project_sets(professor, project_id)
