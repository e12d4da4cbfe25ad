"""
CareerHub - Interview Practice & Live Activity Service

FastAPI backend with:
- Mock interview sessions with synthesized feedback
- Voice interviews through Vapi
- Admin live activity feed over WebSocket
- PostgreSQL for interview history, MongoDB for voice transcripts
- JWT authentication

Run: uvicorn careerhub.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from careerhub.api.routes import api_router, live_router
from careerhub.core.config import get_settings
from careerhub.core.errors import CareerHubError, error_payload
from careerhub.db.mongodb import init_mongo_indexes
from careerhub.db.postgres import init_postgres_schema

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("careerhub")

# Create FastAPI app
app = FastAPI(
    title="CareerHub",
    description="""
    Interview practice and admin live feed for a campus placement platform.

    ## Features
    - **Interviews**: technical, behavioral, HR and custom mock interviews with scored feedback
    - **Voice Interviews**: real-time AI voice interviewer with transcript archive
    - **Admin**: live activity feed, stats and announcements over `/ws/admin`
    - **Authentication**: JWT-based auth for students, recruiters and admins

    ## Databases
    - PostgreSQL: users, interview history
    - MongoDB: voice interview transcripts
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


@app.exception_handler(CareerHubError)
async def careerhub_error_handler(request: Request, exc: CareerHubError):
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(live_router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables and indexes on startup."""
    try:
        init_postgres_schema()
    except Exception as e:
        logger.warning("PostgreSQL schema initialization failed: %s", e)
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "CareerHub"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from careerhub.db.postgres import test_postgres_connection
    from careerhub.db.mongodb import test_mongo_connection

    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
        "voice_interviewer": "configured" if settings.voice_configured else "not configured",
        "feedback_backend": settings.feedback_backend
    }
