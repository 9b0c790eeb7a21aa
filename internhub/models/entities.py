"""
Entity records - plain pydantic models with validation at construction.

They are independent of the persistence binding: the store converts raw
documents with `from_doc()`.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from internhub.utils.logging import get_logger

logger = get_logger(__name__)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    professor = "professor"


class ProjectStatus(str, Enum):
    open = "open"
    in_progress = "in-progress"
    closed = "closed"


class ApplicationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


def _from_doc(cls, doc: dict):
    data = dict(doc)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    return cls.model_validate(data)


# ============================================================
# USER
# ============================================================

class User(BaseModel):
    """A student or a professor. Only students carry skills."""

    id: str
    name: str
    email: EmailStr
    role: UserRole
    department: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _professors_have_no_skills(self):
        if self.role == UserRole.professor and self.skills:
            raise ValueError("professors do not carry skills")
        return self

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.student

    @property
    def is_professor(self) -> bool:
        return self.role == UserRole.professor

    @classmethod
    def from_doc(cls, doc: dict) -> "User":
        return _from_doc(cls, doc)


# ============================================================
# PROJECT
# ============================================================

class Project(BaseModel):
    """
    A supervised internship project.

    `applicants` and `current_interns` are views derived from the project's
    applications and must never intersect.
    """

    id: str
    title: str
    description: str
    supervisor_id: str
    department: str
    category: str
    technologies: List[str] = Field(default_factory=list)
    required_skills: List[str] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.open
    max_interns: int = Field(3, ge=1)
    current_interns: List[str] = Field(default_factory=list)
    applicants: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _applicants_and_interns_disjoint(self):
        overlap = set(self.applicants) & set(self.current_interns)
        if overlap:
            raise ValueError(f"students both applicant and intern: {sorted(overlap)}")
        return self

    def is_supervised_by(self, user: User) -> bool:
        return user.is_professor and user.id == self.supervisor_id

    @property
    def is_full(self) -> bool:
        return len(self.current_interns) >= self.max_interns

    @classmethod
    def from_doc(cls, doc: dict) -> "Project":
        """
        Stored documents that list a student as both applicant and intern
        still load, with the intern entry kept, so rebuild_project_sets()
        can repair them.
        """
        interns = set(doc.get("current_interns") or [])
        overlap = [s for s in doc.get("applicants") or [] if s in interns]
        if overlap:
            logger.warning("project_sets_overlap", project_id=str(doc.get("_id")), student_ids=overlap)
            doc = dict(doc, applicants=[s for s in doc["applicants"] if s not in interns])
        return _from_doc(cls, doc)


# ============================================================
# APPLICATION
# ============================================================

class Application(BaseModel):
    """
    One (student, project) submission. Authoritative record of why a
    student is an applicant or an intern of the project.
    """

    id: str
    student_id: str
    project_id: str
    cover_letter: str
    documents: List[str] = Field(default_factory=list)
    status: ApplicationStatus = ApplicationStatus.pending
    applied_date: datetime
    reviewed_by: Optional[str] = None
    review_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.pending

    @classmethod
    def from_doc(cls, doc: dict) -> "Application":
        return _from_doc(cls, doc)
