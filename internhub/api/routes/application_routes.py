"""
Application Routes

POST /applications - Submit application (student only)
GET /applications/mine - Get my applications (student only)
GET /applications/supervised - Applications to my projects (professor only)
GET /applications/stats - Application counts for the caller
GET /applications/{application_id} - Get one application (owner or supervisor)
PUT /applications/{application_id}/approve - Approve (supervisor only)
PUT /applications/{application_id}/reject - Reject (supervisor only)
DELETE /applications/{application_id} - Withdraw pending application (owner only)
"""

from typing import Union

from fastapi import APIRouter, Depends

from internhub.api.dependencies import get_lifecycle_manager
from internhub.core.auth import get_current_professor, get_current_student, get_current_user
from internhub.models import Application, User
from internhub.services.application_service import ApplicationLifecycleManager
from internhub.schemas.schemas import (
    ApplicationCreate, ApplicationReject, ApplicationListResponse, MessageResponse,
    StudentApplicationStats, SupervisorApplicationStats
)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=Application, status_code=201)
async def submit_application(
    data: ApplicationCreate,
    student: User = Depends(get_current_student),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """Submit an application. One pending application per project."""
    return manager.submit(student, data.project_id, data.cover_letter, data.documents)


@router.get("/mine", response_model=ApplicationListResponse)
async def my_applications(
    student: User = Depends(get_current_student),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    applications = manager.list_mine(student)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.get("/supervised", response_model=ApplicationListResponse)
async def supervised_applications(
    professor: User = Depends(get_current_professor),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """All applications to the caller's projects, newest first."""
    applications = manager.list_for_supervisor(professor)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.get("/stats", response_model=Union[SupervisorApplicationStats, StudentApplicationStats])
async def application_stats(
    user: User = Depends(get_current_user),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    if user.is_professor:
        return manager.supervisor_stats(user)
    return manager.student_stats(user)


@router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    return manager.get_application(user, application_id)


@router.put("/{application_id}/approve", response_model=Application)
async def approve_application(
    application_id: str,
    professor: User = Depends(get_current_professor),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """Approve a pending application; the student becomes an intern."""
    return manager.approve(professor, application_id)


@router.put("/{application_id}/reject", response_model=Application)
async def reject_application(
    application_id: str,
    data: ApplicationReject = None,
    professor: User = Depends(get_current_professor),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    reason = data.reason if data else None
    return manager.reject(professor, application_id, reason)


@router.delete("/{application_id}", response_model=MessageResponse)
async def withdraw_application(
    application_id: str,
    student: User = Depends(get_current_student),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """Withdraw a pending application. Reviewed applications are history."""
    manager.withdraw(student, application_id)
    return MessageResponse(message="Application deleted successfully")
