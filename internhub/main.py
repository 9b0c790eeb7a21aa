"""
Internship Matching Portal - Main Application

FastAPI backend with:
- MongoDB for users, projects and applications
- Skill-based project recommendations and candidate ranking
- Application review workflow (pending -> approved / rejected)
- JWT bearer authentication

Run: uvicorn internhub.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from internhub.api.routes import api_router
from internhub.core.errors import PortalError
from internhub.db.mongodb import init_mongo_indexes, test_mongo_connection
from internhub.schemas.schemas import ErrorResponse
from internhub.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Internship Matching Portal",
    description="""
    Students apply to faculty-supervised internship projects.

    ## Features
    - **Projects**: Professors post projects with required skills
    - **Applications**: Submit, withdraw, approve and reject
    - **Recommendations**: Skill-match ranking of projects and candidates
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    """Typed service failures -> HTTP status with a machine-readable code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message, code=exc.code).model_dump(),
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    init_mongo_indexes()


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
