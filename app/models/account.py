"""ORM model for job-portal accounts (credentials and profile)."""

import enum

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func

from app.models.base import Base


class AccountRole(str, enum.Enum):
    """Roles an account can register with. Fixed at registration."""

    STUDENT = "student"
    RECRUITER = "recruiter"


class Account(Base):
    """
    Registered user with credentials and a profile.

    The profile sub-record (bio, skills, profile_photo) is stored on the same
    row and exposed nested in the account view.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fullname = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    phone_number = Column(String(64), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    profile_photo = Column(String(2048), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
