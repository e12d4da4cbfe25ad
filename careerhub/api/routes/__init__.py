"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerhub.api.routes.auth_routes import router as auth_router
from careerhub.api.routes.interview_routes import router as interview_router
from careerhub.api.routes.voice_routes import router as voice_router
from careerhub.api.routes.admin_routes import router as admin_router
from careerhub.api.routes.live_routes import router as live_router

# Main API router (mounted under /api)
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(interview_router)
api_router.include_router(voice_router)
api_router.include_router(admin_router)

__all__ = ["api_router", "live_router"]
