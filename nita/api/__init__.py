"""API routes."""

from fastapi import APIRouter

from nita.api import admin, auth, health, portal

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(portal.router, tags=["portal"])
router.include_router(admin.router, prefix="/admin")
