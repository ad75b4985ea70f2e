"""
API routes package.

Combines the public registration routes and the administrator routes
under one router mounted at ``/api``.
"""

from fastapi import APIRouter

from graduation.api.routes.admin import router as admin_router
from graduation.api.routes.registration import router as registration_router

router = APIRouter()
router.include_router(registration_router)
router.include_router(admin_router)

__all__ = ["router"]
