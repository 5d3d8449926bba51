"""Pydantic request/response schemas."""

from app.schemas.account import (
    AccountResponse,
    AccountView,
    MessageResponse,
    ProfileView,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AccountResponse",
    "AccountView",
    "HealthResponse",
    "MessageResponse",
    "ProfileView",
]
