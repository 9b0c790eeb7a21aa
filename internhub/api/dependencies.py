"""
FastAPI dependency providers for the services.

Tests swap the store with `app.dependency_overrides[get_store]`.
"""

from fastapi import Depends

from internhub.services.application_service import ApplicationLifecycleManager
from internhub.services.matching_service import RecommendationService
from internhub.services.mongo_service import MongoStore, get_mongo_services
from internhub.services.project_service import ProjectCatalog


def get_store() -> MongoStore:
    return get_mongo_services()


def get_lifecycle_manager(store: MongoStore = Depends(get_store)) -> ApplicationLifecycleManager:
    return ApplicationLifecycleManager(store)


def get_recommendation_service(store: MongoStore = Depends(get_store)) -> RecommendationService:
    return RecommendationService(store)


def get_project_catalog(store: MongoStore = Depends(get_store)) -> ProjectCatalog:
    return ProjectCatalog(store)
