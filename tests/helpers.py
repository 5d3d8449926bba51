"""Shared builders for account tests."""

from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Account, Base
from app.services.upload_encoder import UploadedFile

PHOTO_URL = "https://res.cloudinary.com/demo/image/upload/jobportal/photo.jpeg"
SIGNING_SECRET = "unit-test-secret"


def make_session() -> Session:
    """Fresh in-memory SQLite database with the accounts table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)()


def make_uploader(url: str = PHOTO_URL) -> MagicMock:
    uploader = MagicMock()
    uploader.upload = AsyncMock(return_value=url)
    return uploader


def make_settings(secret: str = SIGNING_SECRET) -> MagicMock:
    settings = MagicMock()
    settings.resolve_signing_secret.return_value = secret
    return settings


def photo(
    filename: str = "photo.jpeg",
    content_type: str = "image/jpeg",
    content: bytes = b"\xff\xd8\xff\xe0fake-jpeg",
) -> UploadedFile:
    return UploadedFile(filename=filename, content_type=content_type, content=content)


def count_accounts(db: Session) -> int:
    return db.query(Account).count()
