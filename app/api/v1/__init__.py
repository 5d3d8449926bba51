"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import health, user

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(user.router, prefix="/user", tags=["user"])
