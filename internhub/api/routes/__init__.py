"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from internhub.api.routes.application_routes import router as application_router
from internhub.api.routes.project_routes import router as project_router
from internhub.api.routes.recommendation_routes import router as recommendation_router
from internhub.schemas.schemas import ErrorResponse

# Body of every PortalError, see main.portal_error_handler
ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 403, 404, 409, 500)
}

# Main API router
api_router = APIRouter(responses=ERROR_RESPONSES)

# Include all sub-routers
api_router.include_router(project_router)
api_router.include_router(application_router)
api_router.include_router(recommendation_router)
