"""
Skill Matching Service

PURPOSE:
Score how well a student's skills cover a project's required skills,
then rank candidate pools (for professors) and project lists (for students).

HOW IT WORKS:
1. Canonicalize skills: trim whitespace, lower-case
2. Count required skills whose canonical form the student has
3. Score = round-half-up(100 * matched / required), as an integer
4. Rank with a stable descending sort, so ties keep caller order

RULES (order matters):
- No required skills -> 100, even for a student with no skills
- No student skills  -> 0
- Exact canonical equality only: no fuzzy matching, no synonyms
"""

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from internhub.core.config import get_settings
from internhub.core.errors import AuthorizationError, NotFoundError
from internhub.models import Application, ApplicationStatus, Project, ProjectStatus, User
from internhub.schemas.schemas import (
    ApplicationMatchResponse,
    CandidateRankingResponse,
    MatchDetails,
    ProjectRecommendation,
    RankedCandidate,
    SkillGapAnalysis,
    SkillGapResponse,
)
from internhub.services.access import require_student
from internhub.utils.logging import get_logger

logger = get_logger(__name__)

NO_SKILLS_ADVICE = "Add skills to your profile to improve your match score"


# ============================================================
# NORMALIZATION
# ============================================================

def normalize_skill(skill: str) -> str:
    """Canonical form used for every comparison."""
    return skill.strip().lower()


def normalize_skills(skills: Optional[Iterable[str]]) -> Set[str]:
    """Canonical skill set. None and [] are both the empty set."""
    if not skills:
        return set()
    return {normalize_skill(s) for s in skills}


# ============================================================
# SCORING
# ============================================================

def _percent_half_up(part: int, whole: int) -> int:
    # integer arithmetic, so 12.5 -> 13 and 66.66 -> 67 exactly
    return (200 * part + whole) // (2 * whole)


def calculate_match(
    candidate_skills: Optional[Sequence[str]],
    required_skills: Optional[Sequence[str]],
) -> int:
    """
    Integer percentage (0-100) of `required_skills` covered by the candidate.

    A required skill counts once however many times the candidate lists it;
    the denominator is the length of `required_skills` as given.
    """
    if not required_skills:
        return 100
    if not candidate_skills:
        return 0

    have = normalize_skills(candidate_skills)
    matched = sum(1 for skill in required_skills if normalize_skill(skill) in have)
    return _percent_half_up(matched, len(required_skills))


def get_matching_details(
    candidate_skills: Optional[Sequence[str]],
    required_skills: Optional[Sequence[str]],
) -> MatchDetails:
    """Split required skills (original casing and order) into matching / missing."""
    required = list(required_skills or [])
    have = normalize_skills(candidate_skills)

    matching = [s for s in required if normalize_skill(s) in have]
    missing = [s for s in required if normalize_skill(s) not in have]

    return MatchDetails(
        matching_skills=matching,
        missing_skills=missing,
        match_percentage=calculate_match(candidate_skills, required),
    )


def skill_gap_analysis(
    candidate_skills: Optional[Sequence[str]],
    required_skills: Optional[Sequence[str]],
) -> SkillGapAnalysis:
    """
    Same shape as get_matching_details(). A candidate with no skills at all
    gets every required skill as missing, 0%, and advice to add skills.
    """
    if not candidate_skills:
        return SkillGapAnalysis(
            matching_skills=[],
            missing_skills=list(required_skills or []),
            match_percentage=0,
            recommendation=NO_SKILLS_ADVICE,
        )
    details = get_matching_details(candidate_skills, required_skills)
    return SkillGapAnalysis(**details.model_dump())


# ============================================================
# RANKING
# ============================================================

def rank_candidates(
    candidates: Iterable[Tuple[Application, Optional[User]]],
    required_skills: Optional[Sequence[str]],
) -> List[RankedCandidate]:
    """
    Rank pending applications by their student's match score.

    `candidates` pairs each application with its student (None if the user
    record is gone) in applied-date order. Nobody is dropped for a low
    score; equal scores keep their input order.
    """
    ranked = []
    for application, student in candidates:
        if application.status != ApplicationStatus.pending:
            continue
        skills = student.skills if student else []
        details = get_matching_details(skills, required_skills)
        ranked.append(RankedCandidate(
            application=application,
            student=student,
            match_score=details.match_percentage,
            match_details=details,
        ))

    # sorted() is stable
    return sorted(ranked, key=lambda c: c.match_score, reverse=True)


def recommend_projects(
    candidate_skills: Optional[Sequence[str]],
    projects: Iterable[Project],
) -> List[ProjectRecommendation]:
    """Open projects with a non-zero score, best first, ties in input order."""
    if not candidate_skills:
        return []

    scored = []
    for project in projects:
        if project.status != ProjectStatus.open:
            continue
        details = get_matching_details(candidate_skills, project.required_skills)
        if details.match_percentage == 0:
            continue
        scored.append(ProjectRecommendation(
            project=project,
            match_score=details.match_percentage,
            match_details=details,
        ))

    return sorted(scored, key=lambda r: r.match_score, reverse=True)


def get_top_recommendations(
    candidate_skills: Optional[Sequence[str]],
    projects: Iterable[Project],
    limit: Optional[int] = None,
) -> List[ProjectRecommendation]:
    """recommend_projects() truncated to `limit`; a missing or non-positive limit uses the default."""
    if not limit or limit <= 0:
        limit = get_settings().default_recommendation_limit
    return recommend_projects(candidate_skills, projects)[:limit]


# ============================================================
# RECOMMENDATION SERVICE (store-backed)
# ============================================================

class RecommendationService:
    """
    Runs the matching functions against stored users, projects and
    applications, with the role and ownership checks of each caller.
    """

    def __init__(self, store):
        self.store = store

    def _get_project(self, project_id: str) -> Project:
        project = self.store.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def recommend_for_student(self, student: User) -> List[ProjectRecommendation]:
        require_student(student)
        results = recommend_projects(student.skills, self.store.projects.find_open())
        logger.info("projects_recommended", student_id=student.id, count=len(results))
        return results

    def top_for_student(self, student: User, limit: Optional[int] = None) -> List[ProjectRecommendation]:
        require_student(student)
        return get_top_recommendations(student.skills, self.store.projects.find_open(), limit)

    def rank_for_project(self, professor: User, project_id: str) -> CandidateRankingResponse:
        """Pending candidates of one project, best match first. Supervisor only."""
        project = self._get_project(project_id)
        if not project.is_supervised_by(professor):
            raise AuthorizationError("Not authorized to view candidates for this project")

        applications = self.store.applications.find_by_projects(
            [project.id], status=ApplicationStatus.pending, oldest_first=True
        )
        students = self.store.users.get_many(a.student_id for a in applications)
        ranked = rank_candidates(
            ((a, students.get(a.student_id)) for a in applications),
            project.required_skills,
        )
        logger.info("candidates_ranked", project_id=project.id, count=len(ranked))
        return CandidateRankingResponse(
            project_id=project.id,
            project_title=project.title,
            required_skills=project.required_skills,
            candidates=ranked,
            total=len(ranked),
        )

    def skill_gap(self, student: User, project_id: str) -> SkillGapResponse:
        require_student(student)
        project = self._get_project(project_id)
        return SkillGapResponse(
            project_id=project.id,
            project_title=project.title,
            required_skills=project.required_skills,
            student_skills=student.skills,
            analysis=skill_gap_analysis(student.skills, project.required_skills),
        )

    def match_for_application(self, actor: User, application_id: str) -> ApplicationMatchResponse:
        """Match details of one application, for its student or the supervisor."""
        application = self.store.applications.get_by_id(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        project = self._get_project(application.project_id)

        if actor.id != application.student_id and not project.is_supervised_by(actor):
            raise AuthorizationError("Not authorized to view this application")

        student = self.store.users.get_by_id(application.student_id)
        if student is None:
            raise NotFoundError("Student not found")

        return ApplicationMatchResponse(
            application_id=application.id,
            student_name=student.name,
            project_title=project.title,
            match_details=get_matching_details(student.skills, project.required_skills),
        )
