"""SQLAlchemy ORM models."""

from app.models.account import Account, AccountRole
from app.models.base import Base

__all__ = ["Account", "AccountRole", "Base"]
