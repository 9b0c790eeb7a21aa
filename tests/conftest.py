"""Shared fixtures: an in-memory MongoDB and a small cast of users and projects."""

import mongomock
import pytest

from internhub.core.config import Settings
from internhub.models import UserRole
from internhub.services.application_service import ApplicationLifecycleManager
from internhub.services.matching_service import RecommendationService
from internhub.services.mongo_service import MongoStore
from internhub.services.project_service import ProjectCatalog


COVER_LETTER = (
    "I have built several data pipelines in Python and would love to "
    "contribute to this research project over the summer."
)


@pytest.fixture
def db():
    return mongomock.MongoClient()["internhub_test"]


@pytest.fixture
def store(db):
    return MongoStore(db)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def manager(store, settings):
    return ApplicationLifecycleManager(store, settings)


@pytest.fixture
def recommender(store):
    return RecommendationService(store)


@pytest.fixture
def catalog(store, settings):
    return ProjectCatalog(store, settings)


@pytest.fixture
def professor(store):
    return store.users.insert("Ada Lovelace", "ada@university.edu", UserRole.professor, "CS")


@pytest.fixture
def other_professor(store):
    return store.users.insert("Alan Turing", "alan@university.edu", UserRole.professor, "Math")


@pytest.fixture
def student(store):
    return store.users.insert(
        "Grace Hopper", "grace@university.edu", UserRole.student, "CS", ["python ", "JavaScript", "sql"]
    )


@pytest.fixture
def other_student(store):
    return store.users.insert(
        "Katherine Johnson", "katherine@university.edu", UserRole.student, "Math", ["Docker"]
    )


def make_project(store, supervisor, **overrides):
    fields = {
        "title": "Data Pipeline Research",
        "description": "Build and evaluate streaming data pipelines.",
        "supervisor_id": supervisor.id,
        "department": "CS",
        "category": "Data Engineering",
        "technologies": ["Kafka"],
        "required_skills": ["Python", "SQL", "Docker"],
        "max_interns": 3,
    }
    fields.update(overrides)
    return store.projects.insert(fields)


@pytest.fixture
def project(store, professor):
    return make_project(store, professor)


@pytest.fixture
def new_project(store):
    """Factory: new_project(supervisor, **field_overrides)."""
    return lambda supervisor, **overrides: make_project(store, supervisor, **overrides)
