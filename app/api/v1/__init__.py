"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin_logs, admins, auth, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(admins.router, prefix="/admins", tags=["admins"])
router.include_router(admin_logs.router, prefix="/admin-logs", tags=["admin-logs"])
