"""
API routes
Aggregates every sub-router
"""
from fastapi import APIRouter

from medilinko.app.api.routes.medicines import router as medicines_router
from medilinko.app.api.routes.notifications import router as notifications_router
from medilinko.app.api.routes.users import router as users_router
from medilinko.app.api.routes.reminders import router as reminders_router

# main router
router = APIRouter()

# every sub-router is mounted under /api/v1
router.include_router(medicines_router, prefix="/api/v1", tags=["Medicines"])
router.include_router(notifications_router, prefix="/api/v1", tags=["Notifications"])
router.include_router(users_router, prefix="/api/v1", tags=["Users"])
router.include_router(reminders_router, prefix="/api/v1", tags=["Reminders"])

__all__ = ["router"]
