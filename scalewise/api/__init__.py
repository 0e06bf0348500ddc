"""
Scalewise API package initialization.

This package contains FastAPI router modules for the Scalewise dashboard:
- offers: Offer performance table, scaling recommendations, buyer breakdowns
- media_buyers: Per-buyer performance and activity
- cash: Cash projection and resource summary
- notes: Key-value store access for operator notes
- jobs: On-demand triggers for scheduled jobs
"""

from fastapi import APIRouter

# Import router modules
from scalewise.api.offers import router as offers_router
from scalewise.api.media_buyers import router as media_buyers_router
from scalewise.api.cash import router as cash_router
from scalewise.api.notes import router as notes_router
from scalewise.api.jobs import router as jobs_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(offers_router, prefix="/offers", tags=["offers"])
api_router.include_router(media_buyers_router, prefix="/media-buyers", tags=["media-buyers"])
api_router.include_router(cash_router, prefix="/cash", tags=["cash"])
api_router.include_router(notes_router, prefix="/notes", tags=["notes"])
api_router.include_router(jobs_router, prefix="/jobs", tags=["jobs"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "offers_router",
    "media_buyers_router",
    "cash_router",
    "notes_router",
    "jobs_router",
]
