"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Match results are also returned by the services directly.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from internhub.models import Application, Project, ProjectStatus, User


# ============================================================
# MATCHING SCHEMAS
# ============================================================

class MatchDetails(BaseModel):
    """Required skills split by whether the candidate covers them."""
    matching_skills: List[str] = []
    missing_skills: List[str] = []
    match_percentage: int = Field(..., ge=0, le=100)

class SkillGapAnalysis(MatchDetails):
    recommendation: Optional[str] = None

class RankedCandidate(BaseModel):
    application: Application
    student: Optional[User] = None
    match_score: int
    match_details: MatchDetails

class ProjectRecommendation(BaseModel):
    project: Project
    match_score: int
    match_details: MatchDetails


# ============================================================
# PROJECT SCHEMAS
# ============================================================

class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=20)
    department: str = Field(..., min_length=1)
    category: str = Field(..., min_length=2, max_length=100)
    technologies: List[str] = []
    required_skills: List[str] = []
    max_interns: Optional[int] = Field(None, ge=1)

class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    description: Optional[str] = Field(None, min_length=20)
    department: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=2, max_length=100)
    technologies: Optional[List[str]] = None
    required_skills: Optional[List[str]] = None
    max_interns: Optional[int] = Field(None, ge=1)
    status: Optional[ProjectStatus] = None

class ProjectListResponse(BaseModel):
    projects: List[Project]
    total: int
    page: int
    page_size: int

class FieldCount(BaseModel):
    value: str
    count: int

class ProjectStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_category: List[FieldCount]
    by_department: List[FieldCount]
    top_skills: List[FieldCount]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    project_id: str
    cover_letter: str
    documents: List[str] = []

class ApplicationReject(BaseModel):
    reason: Optional[str] = None

class ApplicationListResponse(BaseModel):
    applications: List[Application]
    total: int

class StudentApplicationStats(BaseModel):
    total_applications: int
    pending: int
    approved: int
    rejected: int

class SupervisorApplicationStats(StudentApplicationStats):
    total_projects: int
    total_interns: int


# ============================================================
# RECOMMENDATION SCHEMAS
# ============================================================

class RecommendationListResponse(BaseModel):
    recommendations: List[ProjectRecommendation]
    total: int
    message: Optional[str] = None

class CandidateRankingResponse(BaseModel):
    project_id: str
    project_title: str
    required_skills: List[str]
    candidates: List[RankedCandidate]
    total: int

class SkillGapResponse(BaseModel):
    project_id: str
    project_title: str
    required_skills: List[str]
    student_skills: List[str]
    analysis: SkillGapAnalysis

class ApplicationMatchResponse(BaseModel):
    application_id: str
    student_name: str
    project_title: str
    match_details: MatchDetails


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    code: str
