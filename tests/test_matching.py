"""Tests for skill normalization, scoring and ranking."""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

import pytest
from hypothesis import given, strategies as st

from internhub.models import Application, ApplicationStatus, Project, ProjectStatus, User, UserRole
from internhub.services.matching_service import (
    NO_SKILLS_ADVICE,
    calculate_match,
    get_matching_details,
    get_top_recommendations,
    normalize_skill,
    normalize_skills,
    rank_candidates,
    recommend_projects,
    skill_gap_analysis,
)


SKILL_POOL = ["Python", "SQL", "Docker", "JavaScript", "React", "Kubernetes", "C++", "Go"]

skills_strategy = st.lists(st.sampled_from(SKILL_POOL), max_size=8)


@st.composite
def messy_casing(draw, skill):
    """The same skill with random casing and surrounding whitespace."""
    chars = [c.upper() if draw(st.booleans()) else c.lower() for c in skill]
    left = draw(st.sampled_from(["", " ", "  ", "\t"]))
    right = draw(st.sampled_from(["", " ", "\n"]))
    return left + "".join(chars) + right


def _project(pid, required, status=ProjectStatus.open):
    return Project(
        id=pid,
        title=f"Project {pid}",
        description="A project used for ranking tests.",
        supervisor_id="prof",
        department="CS",
        category="Research",
        required_skills=required,
        status=status,
    )


def _candidate(n, skills, status=ApplicationStatus.pending):
    student = User(
        id=f"s{n}", name=f"Student {n}", email=f"s{n}@university.edu",
        role=UserRole.student, skills=skills,
    )
    application = Application(
        id=f"a{n}", student_id=student.id, project_id="p1", cover_letter="...",
        status=status, applied_date=datetime(2024, 1, 1) + timedelta(days=n),
    )
    return application, student


class TestNormalization:
    def test_trims_and_lowercases(self):
        assert normalize_skill("  PyThOn \n") == "python"

    def test_empty_and_none_are_empty_sets(self):
        assert normalize_skills(None) == set()
        assert normalize_skills([]) == set()

    def test_duplicates_collapse(self):
        assert normalize_skills(["SQL", "sql ", " Sql"]) == {"sql"}


class TestCalculateMatch:
    def test_two_of_three_skills(self):
        details = get_matching_details(["python ", "JavaScript", "sql"], ["Python", "SQL", "Docker"])
        assert details.matching_skills == ["Python", "SQL"]
        assert details.missing_skills == ["Docker"]
        assert details.match_percentage == 67

    def test_no_requirements_beats_no_skills(self):
        assert calculate_match([], []) == 100
        assert calculate_match(None, None) == 100

    def test_no_candidate_skills(self):
        assert calculate_match([], ["Python"]) == 0
        assert calculate_match(None, ["Python"]) == 0

    def test_rounds_half_up(self):
        required = ["a", "b", "c", "d", "e", "f", "g", "h"]
        # 1/8 = 12.5 -> 13, 5/8 = 62.5 -> 63
        assert calculate_match(["a"], required) == 13
        assert calculate_match(["a", "b", "c", "d", "e"], required) == 63
        # 1/3 = 33.3 -> 33
        assert calculate_match(["a"], ["a", "b", "c"]) == 33

    def test_repeated_candidate_skill_counts_once(self):
        assert calculate_match(["Python", "python", "PYTHON"], ["Python", "SQL"]) == 50

    def test_no_partial_matching(self):
        assert calculate_match(["Java"], ["JavaScript"]) == 0
        assert calculate_match(["Postgres"], ["PostgreSQL"]) == 0

    @given(candidate=skills_strategy)
    def test_empty_requirements_always_full(self, candidate):
        assert calculate_match(candidate, []) == 100

    @given(required=st.lists(st.sampled_from(SKILL_POOL), min_size=1, max_size=8))
    def test_empty_candidate_always_zero(self, required):
        assert calculate_match([], required) == 0

    @given(candidate=skills_strategy, required=st.lists(st.sampled_from(SKILL_POOL), min_size=1))
    def test_score_matches_formula(self, candidate, required):
        score = calculate_match(candidate, required)
        matched = len(get_matching_details(candidate, required).matching_skills)
        exact = Decimal(100 * matched) / Decimal(len(required))
        assert 0 <= score <= 100
        assert score == int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @given(data=st.data(), candidate=skills_strategy, required=skills_strategy)
    def test_case_and_whitespace_invariant(self, data, candidate, required):
        messy_candidate = [data.draw(messy_casing(s)) for s in candidate]
        messy_required = [data.draw(messy_casing(s)) for s in required]
        assert calculate_match(messy_candidate, messy_required) == calculate_match(candidate, required)

    @given(candidate=skills_strategy, required=skills_strategy)
    def test_details_partition_required(self, candidate, required):
        details = get_matching_details(candidate, required)
        assert set(details.matching_skills) | set(details.missing_skills) == set(required)
        assert not set(details.matching_skills) & set(details.missing_skills)
        assert details.match_percentage == calculate_match(candidate, required)


class TestSkillGap:
    def test_no_skills_gets_advice(self):
        analysis = skill_gap_analysis([], ["Python", "SQL"])
        assert analysis.missing_skills == ["Python", "SQL"]
        assert analysis.matching_skills == []
        assert analysis.match_percentage == 0
        assert analysis.recommendation == NO_SKILLS_ADVICE

    def test_with_skills_matches_details(self):
        analysis = skill_gap_analysis(["sql"], ["Python", "SQL"])
        assert analysis.matching_skills == ["SQL"]
        assert analysis.missing_skills == ["Python"]
        assert analysis.match_percentage == 50
        assert analysis.recommendation is None


class TestRankCandidates:
    def test_orders_by_score_and_keeps_zero(self):
        ranked = rank_candidates(
            [_candidate(1, []), _candidate(2, ["Python", "SQL"]), _candidate(3, ["sql"])],
            ["Python", "SQL"],
        )
        assert [c.application.id for c in ranked] == ["a2", "a3", "a1"]
        assert [c.match_score for c in ranked] == [100, 50, 0]

    def test_ties_keep_input_order(self):
        ranked = rank_candidates(
            [_candidate(n, ["SQL"]) for n in range(1, 6)], ["Python", "SQL"]
        )
        assert [c.application.id for c in ranked] == ["a1", "a2", "a3", "a4", "a5"]

    def test_only_pending(self):
        ranked = rank_candidates(
            [
                _candidate(1, ["Python"], ApplicationStatus.approved),
                _candidate(2, ["Python"], ApplicationStatus.rejected),
                _candidate(3, []),
            ],
            ["Python"],
        )
        assert [c.application.id for c in ranked] == ["a3"]

    def test_missing_student_scores_as_no_skills(self):
        application, _ = _candidate(1, [])
        ranked = rank_candidates([(application, None)], ["Python"])
        assert ranked[0].match_score == 0
        assert ranked[0].student is None

    @given(st.lists(skills_strategy, max_size=10))
    def test_ranking_is_stable(self, pools):
        candidates = [_candidate(n, skills) for n, skills in enumerate(pools)]
        ranked = rank_candidates(candidates, ["Python", "SQL", "Docker"])
        for earlier, later in zip(ranked, ranked[1:]):
            assert earlier.match_score >= later.match_score
            if earlier.match_score == later.match_score:
                assert earlier.application.applied_date < later.application.applied_date


class TestRecommendProjects:
    def test_filters_closed_and_zero(self):
        projects = [
            _project("p1", ["Python", "SQL"]),
            _project("p2", ["Rust"]),
            _project("p3", ["Python"], status=ProjectStatus.closed),
            _project("p4", ["Python"], status=ProjectStatus.in_progress),
            _project("p5", ["Python"]),
        ]
        recs = recommend_projects(["python"], projects)
        assert [r.project.id for r in recs] == ["p5", "p1"]
        assert [r.match_score for r in recs] == [100, 50]

    def test_no_skills_is_empty_even_for_open_requirements(self):
        assert recommend_projects([], [_project("p1", [])]) == []
        assert recommend_projects(None, [_project("p1", ["Python"])]) == []

    def test_project_without_requirements_is_full_match(self):
        recs = recommend_projects(["Go"], [_project("p1", [])])
        assert recs[0].match_score == 100

    @given(candidate=skills_strategy, pools=st.lists(skills_strategy, max_size=8))
    def test_never_returns_zero(self, candidate, pools):
        projects = [_project(f"p{n}", req) for n, req in enumerate(pools)]
        assert all(r.match_score > 0 for r in recommend_projects(candidate, projects))

    @pytest.mark.parametrize("limit, expected", [(None, 5), (0, 5), (-3, 5), (2, 2), (10, 7)])
    def test_top_recommendations_limit(self, limit, expected):
        projects = [_project(f"p{n}", ["Python"]) for n in range(7)]
        assert len(get_top_recommendations(["Python"], projects, limit)) == expected
