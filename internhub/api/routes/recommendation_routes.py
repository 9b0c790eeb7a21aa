"""
Recommendation Routes

GET /recommendations/projects - Open projects ranked for the student
GET /recommendations/projects/top - Top N of the above
GET /recommendations/candidates/{project_id} - Pending candidates ranked (supervisor only)
GET /recommendations/skills/gap/{project_id} - Skill gap against a project (student only)
GET /recommendations/match/{application_id} - Match details of one application
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from internhub.api.dependencies import get_recommendation_service
from internhub.core.auth import get_current_professor, get_current_student, get_current_user
from internhub.models import User
from internhub.services.matching_service import NO_SKILLS_ADVICE, RecommendationService
from internhub.schemas.schemas import (
    ApplicationMatchResponse, CandidateRankingResponse, RecommendationListResponse,
    SkillGapResponse
)

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


@router.get("/projects", response_model=RecommendationListResponse)
async def recommended_projects(
    student: User = Depends(get_current_student),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """
    Open projects ranked by skill match.

    Projects with a 0% match are left out; a student without skills gets
    an empty list and a hint to add skills.
    """
    recs = service.recommend_for_student(student)
    message = None if student.skills else NO_SKILLS_ADVICE
    return RecommendationListResponse(recommendations=recs, total=len(recs), message=message)


@router.get("/projects/top", response_model=RecommendationListResponse)
async def top_recommended_projects(
    limit: Optional[int] = Query(None, description="Defaults to 5 when missing or not positive"),
    student: User = Depends(get_current_student),
    service: RecommendationService = Depends(get_recommendation_service)
):
    recs = service.top_for_student(student, limit)
    return RecommendationListResponse(recommendations=recs, total=len(recs))


@router.get("/candidates/{project_id}", response_model=CandidateRankingResponse)
async def ranked_candidates(
    project_id: str,
    professor: User = Depends(get_current_professor),
    service: RecommendationService = Depends(get_recommendation_service)
):
    return service.rank_for_project(professor, project_id)


@router.get("/skills/gap/{project_id}", response_model=SkillGapResponse)
async def skill_gap(
    project_id: str,
    student: User = Depends(get_current_student),
    service: RecommendationService = Depends(get_recommendation_service)
):
    return service.skill_gap(student, project_id)


@router.get("/match/{application_id}", response_model=ApplicationMatchResponse)
async def application_match(
    application_id: str,
    user: User = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service)
):
    return service.match_for_application(user, application_id)
