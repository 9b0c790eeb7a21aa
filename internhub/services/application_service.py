"""
Application Lifecycle Service

STATE MACHINE (per application):
    pending --approve--> approved   (terminal)
    pending --reject---> rejected   (terminal)
    pending --withdraw-> (deleted)

CONSISTENCY WITH THE PROJECT:
- The application is the authoritative record. The project's `applicants`
  (pending) and `current_interns` (approved) arrays are views kept in step
  with it here, and nowhere else.
- A transition is one compare-and-set on the application's status, followed
  by one atomic $addToSet / $pullAll on the project. Two concurrent approvals
  of the same application: exactly one wins, the other gets ConflictError.
- Submit lists the applicant with a write that skips current interns, so an
  approval racing a re-submit cannot put one student in both arrays.
- If the project write fails after the status write, the status stands,
  InternalError is raised and rebuild_project_sets() repairs the view.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from internhub.core.config import Settings, get_settings
from internhub.core.errors import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from internhub.models import Application, ApplicationStatus, Project, ProjectStatus, User
from internhub.schemas.schemas import StudentApplicationStats, SupervisorApplicationStats
from internhub.services.access import require_professor, require_student
from internhub.utils.logging import get_logger

logger = get_logger(__name__)


class ApplicationLifecycleManager:
    """Owns every application state change and its effect on the project."""

    def __init__(self, store, settings: Settings = None):
        self.store = store
        self.settings = settings or get_settings()

    # ------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------

    @contextmanager
    def _store_errors(self, operation: str):
        try:
            yield
        except PyMongoError as e:
            logger.error("store_failure", operation=operation, error=str(e))
            raise InternalError(f"Storage failure during {operation}") from e

    def _get_application(self, application_id: str) -> Application:
        application = self.store.applications.get_by_id(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    def _get_project(self, project_id: str) -> Project:
        project = self.store.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def _get_supervised(self, professor: User, application_id: str):
        require_professor(professor)
        application = self._get_application(application_id)
        project = self._get_project(application.project_id)
        if not project.is_supervised_by(professor):
            raise AuthorizationError("Not authorized to review this application")
        return application, project

    def _sync_project(self, project_id: str, application_id: str, **changes) -> Optional[Project]:
        """Apply set changes to the project after a committed status write."""
        try:
            project = self.store.projects.update_sets(project_id, **changes)
        except PyMongoError as e:
            logger.error(
                "project_sets_out_of_sync",
                project_id=project_id,
                application_id=application_id,
                error=str(e),
            )
            raise InternalError(
                "Application updated but project membership was not; rebuild the project sets"
            ) from e
        if project is None:
            logger.warning("project_missing_on_sync", project_id=project_id, application_id=application_id)
        return project

    def _review(self, application: Application, professor: User, fields: dict) -> Application:
        updated = self.store.applications.update_if_status(
            application.id,
            ApplicationStatus.pending,
            {"reviewed_by": professor.id, "review_date": datetime.utcnow(), **fields},
        )
        if updated is None:
            # lost the race to another reviewer, or withdrawn meanwhile
            logger.warning("review_conflict", application_id=application.id, reviewer_id=professor.id)
            raise ConflictError("Application is no longer pending", code="not-pending")
        return updated

    # ------------------------------------------------------------
    # student operations
    # ------------------------------------------------------------

    def submit(
        self,
        student: User,
        project_id: str,
        cover_letter: str,
        documents: Optional[List[str]] = None,
    ) -> Application:
        """Create a pending application and list the student as applicant."""
        require_student(student)

        min_length = self.settings.min_cover_letter_length
        if not cover_letter or len(cover_letter.strip()) < min_length:
            raise ValidationError(f"Cover letter must be at least {min_length} characters")
        documents = list(documents or [])
        if not all(isinstance(d, str) and d for d in documents):
            raise ValidationError("Documents must be non-empty file references")

        with self._store_errors("submit"):
            project = self._get_project(project_id)
            if student.id in project.current_interns:
                raise ConflictError("You are already an intern on this project", code="already-intern")
            if self.store.applications.find_pending(student.id, project.id):
                raise ConflictError("You have already applied to this project", code="duplicate")

            try:
                application = self.store.applications.insert(
                    student.id, project.id, cover_letter, documents
                )
            except DuplicateKeyError:
                raise ConflictError("You have already applied to this project", code="duplicate")

            try:
                listed = self.store.projects.add_applicant_unless_intern(project.id, student.id)
            except PyMongoError:
                self.store.applications.delete_if_status(application.id, ApplicationStatus.pending)
                raise
            if listed is None:
                # approved on another application since the project was read
                self.store.applications.delete_if_status(application.id, ApplicationStatus.pending)
                logger.warning(
                    "submit_lost_to_approval",
                    application_id=application.id,
                    project_id=project.id,
                    student_id=student.id,
                )
                self._get_project(project.id)
                raise ConflictError("You are already an intern on this project", code="already-intern")

        logger.info(
            "application_submitted",
            application_id=application.id,
            project_id=project.id,
            student_id=student.id,
        )
        return application

    def withdraw(self, student: User, application_id: str) -> None:
        """Delete a still-pending application owned by `student`."""
        with self._store_errors("withdraw"):
            application = self._get_application(application_id)
            if not student.is_student or application.student_id != student.id:
                raise AuthorizationError("Not authorized to delete this application")
            if not application.is_pending:
                raise ConflictError("Can only delete pending applications", code="not-pending")

            if not self.store.applications.delete_if_status(application.id, ApplicationStatus.pending):
                logger.warning("withdraw_conflict", application_id=application.id)
                raise ConflictError("Can only delete pending applications", code="not-pending")

            self._sync_project(
                application.project_id, application.id, remove_applicants=[student.id]
            )

        logger.info("application_withdrawn", application_id=application.id, student_id=student.id)

    def apply_to_project(self, student: User, project_id: str) -> Project:
        """
        Direct project-level application: list the student as an applicant
        without an application record. rebuild_project_sets() drops such
        entries, since only applications are authoritative.
        """
        require_student(student)
        with self._store_errors("apply_to_project"):
            project = self.store.projects.add_applicant_if_eligible(project_id, student.id)
            if project is not None:
                logger.info("project_applicant_added", project_id=project.id, student_id=student.id)
                return project

            project = self._get_project(project_id)
            if project.status != ProjectStatus.open:
                raise ConflictError("This project is not accepting applications", code="not-open")
            if student.id in project.current_interns:
                raise ConflictError("You are already an intern on this project", code="already-intern")
            raise ConflictError("You have already applied to this project", code="duplicate")

    def list_mine(self, student: User) -> List[Application]:
        require_student(student)
        with self._store_errors("list_mine"):
            return self.store.applications.find_by_student(student.id)

    def student_stats(self, student: User) -> StudentApplicationStats:
        require_student(student)
        with self._store_errors("student_stats"):
            counts = self.store.applications.count_by_status({"student_id": student.id})
        return StudentApplicationStats(total_applications=sum(counts.values()), **counts)

    # ------------------------------------------------------------
    # supervisor operations
    # ------------------------------------------------------------

    def approve(self, professor: User, application_id: str) -> Application:
        """pending -> approved; the student moves from applicants to interns."""
        with self._store_errors("approve"):
            application, project = self._get_supervised(professor, application_id)
            if not application.is_pending:
                raise ConflictError(
                    f"Application is already {application.status.value}", code="not-pending"
                )
            if self.settings.enforce_max_interns and project.is_full:
                raise ConflictError("Project has reached its intern limit", code="capacity")

            updated = self._review(application, professor, {"status": ApplicationStatus.approved.value})
            self._sync_project(
                project.id,
                application.id,
                add_interns=[application.student_id],
                remove_applicants=[application.student_id],
            )

        logger.info(
            "application_approved",
            application_id=application.id,
            project_id=project.id,
            student_id=application.student_id,
            reviewer_id=professor.id,
        )
        return updated

    def reject(self, professor: User, application_id: str, reason: Optional[str] = None) -> Application:
        """pending -> rejected; the student leaves applicants, interns untouched."""
        with self._store_errors("reject"):
            application, project = self._get_supervised(professor, application_id)
            if not application.is_pending:
                raise ConflictError(
                    f"Application is already {application.status.value}", code="not-pending"
                )

            updated = self._review(
                application,
                professor,
                {"status": ApplicationStatus.rejected.value, "rejection_reason": reason},
            )
            self._sync_project(
                project.id, application.id, remove_applicants=[application.student_id]
            )

        logger.info(
            "application_rejected",
            application_id=application.id,
            project_id=project.id,
            student_id=application.student_id,
            reviewer_id=professor.id,
        )
        return updated

    def list_for_supervisor(self, professor: User) -> List[Application]:
        """Applications to every project `professor` supervises, newest first."""
        require_professor(professor)
        with self._store_errors("list_for_supervisor"):
            projects = self.store.projects.find_by_supervisor(professor.id)
            if not projects:
                return []
            return self.store.applications.find_by_projects(p.id for p in projects)

    def supervisor_stats(self, professor: User) -> SupervisorApplicationStats:
        require_professor(professor)
        with self._store_errors("supervisor_stats"):
            projects = self.store.projects.find_by_supervisor(professor.id)
            counts = self.store.applications.count_by_status(
                {"project_id": {"$in": [p.id for p in projects]}}
            )
        return SupervisorApplicationStats(
            total_projects=len(projects),
            total_interns=sum(len(p.current_interns) for p in projects),
            total_applications=sum(counts.values()),
            **counts,
        )

    def rebuild_project_sets(self, professor: User, project_id: str) -> Project:
        """Recompute applicants / interns from the project's applications."""
        require_professor(professor)
        with self._store_errors("rebuild_project_sets"):
            project = self._get_project(project_id)
            if not project.is_supervised_by(professor):
                raise AuthorizationError("Not authorized to modify this project")

            apps = self.store.applications
            interns = apps.student_ids_with_status(project.id, ApplicationStatus.approved)
            applicants = [
                s for s in apps.student_ids_with_status(project.id, ApplicationStatus.pending)
                if s not in interns
            ]
            rebuilt = self.store.projects.replace_sets(project.id, applicants, interns)
            if rebuilt is None:
                raise NotFoundError("Project not found")

        logger.info(
            "project_sets_rebuilt",
            project_id=project.id,
            applicants=len(applicants),
            interns=len(interns),
        )
        return rebuilt

    # ------------------------------------------------------------
    # shared
    # ------------------------------------------------------------

    def get_application(self, actor: User, application_id: str) -> Application:
        """Visible to the owning student and to the project's supervisor."""
        with self._store_errors("get_application"):
            application = self._get_application(application_id)
            if actor.id == application.student_id:
                return application
            project = self._get_project(application.project_id)
            if not project.is_supervised_by(actor):
                raise AuthorizationError("Not authorized to view this application")
            return application
