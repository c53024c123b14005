"""Main API router aggregation."""

from fastapi import APIRouter

from chirper.api.auth import router as auth_router
from chirper.api.users import router as users_router

# Main API router; paths are served from the root so emailed links stay short
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(users_router)
api_router.include_router(auth_router)
