"""Account lifecycle: register, login, logout and partial profile update."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool

from app.core.errors import (
    AuthError,
    ConflictError,
    InvalidFileError,
    NotFoundError,
    RoleMismatchError,
    UploadError,
    ValidationError,
)
from app.core.security import SESSION_TTL, hash_password, issue_session_token, verify_password
from app.models import Account, AccountRole
from app.services.account_store import AccountStore
from app.services.media_upload import MediaUploader
from app.services.upload_encoder import UploadedFile, encode_upload

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

ALL_FIELDS_REQUIRED = "All fields are required"
BAD_CREDENTIALS = "Incorrect email or password."
# Kept verbatim: clients match on it even though the account does exist.
ROLE_MISMATCH = "Account doesn't exist with current role."

VALID_ROLES = frozenset(r.value for r in AccountRole)


@dataclass
class RegistrationInput:
    fullname: str | None = None
    email: str | None = None
    phone_number: str | None = None
    password: str | None = None
    role: str | None = None


@dataclass
class LoginInput:
    email: str | None = None
    password: str | None = None
    role: str | None = None


@dataclass
class ProfileUpdate:
    """
    Partial profile update. None means "not supplied" and leaves the stored
    value alone; any other value, including "", is applied.
    """

    fullname: str | None = None
    email: str | None = None
    phone_number: str | None = None
    bio: str | None = None
    skills: str | None = None


@dataclass
class LoginResult:
    account: Account
    token: str


def parse_skills(raw: str) -> list[str]:
    """Split a comma-separated skills string and trim each entry. Empty entries are kept."""
    return [skill.strip() for skill in raw.split(",")]


class AccountService:
    """Orchestrates hashing, uploads, the account store and session tokens."""

    def __init__(self, store: AccountStore, uploader: MediaUploader, settings: Settings) -> None:
        self.store = store
        self.uploader = uploader
        self.settings = settings

    async def register(self, data: RegistrationInput, file: UploadedFile | None) -> None:
        """
        Create an account with a hashed password and an uploaded profile photo.

        The duplicate-email check runs after encoding but before the upload, so a
        duplicate never reaches the media host.
        """
        if not (data.fullname and data.email and data.phone_number and data.password and data.role):
            raise ValidationError(ALL_FIELDS_REQUIRED)
        if file is None:
            raise ValidationError("Profile photo is required")
        if data.role not in VALID_ROLES:
            raise ValidationError(
                f"Role must be one of: {', '.join(sorted(VALID_ROLES))}"
            )

        try:
            encoded = encode_upload(file)
        except InvalidFileError as e:
            raise ValidationError(f"Invalid file: {e.message}") from e

        if self.store.get_by_email(data.email) is not None:
            raise ConflictError("User already exists with this email.")

        try:
            photo_url = await self.uploader.upload(encoded.data_uri)
        except Exception as e:
            logger.error("Profile photo upload failed during registration: %s", e)
            raise UploadError("Failed to upload profile photo") from e

        # bcrypt is CPU-bound; keep it off the event loop.
        password_hash = await run_in_threadpool(hash_password, data.password)
        account = Account(
            fullname=data.fullname,
            email=data.email,
            phone_number=data.phone_number,
            password_hash=password_hash,
            role=data.role,
            skills=[],
            profile_photo=photo_url,
        )
        try:
            self.store.insert(account)
        except Exception:
            # No compensating delete on the media host; record what was orphaned.
            logger.error(
                "Account insert failed after upload",
                extra={"orphaned_media_url": photo_url},
            )
            raise
        logger.info("Account registered", extra={"account_id": account.id, "role": account.role})

    async def login(self, data: LoginInput) -> LoginResult:
        """Check credentials and role; issue a one-day session token."""
        if not (data.email and data.password and data.role):
            raise ValidationError(ALL_FIELDS_REQUIRED)

        account = self.store.get_by_email(data.email)
        if account is None:
            raise AuthError(BAD_CREDENTIALS)
        if not await run_in_threadpool(verify_password, data.password, account.password_hash):
            raise AuthError(BAD_CREDENTIALS)
        if data.role != account.role:
            raise RoleMismatchError(ROLE_MISMATCH)

        token = issue_session_token(
            account.id,
            secret=self.settings.resolve_signing_secret(),
            ttl=SESSION_TTL,
        )
        logger.info("Account logged in", extra={"account_id": account.id})
        return LoginResult(account=account, token=token)

    def logout(self) -> str:
        """Stateless: nothing to revoke server-side. Returns the confirmation message."""
        return "Logged out successfully."

    async def update_profile(
        self,
        account_id: int,
        update: ProfileUpdate,
        file: UploadedFile | None = None,
    ) -> Account:
        """
        Apply the supplied fields to the caller's account and persist it.

        Encoder and upload failures both surface as UploadError.
        """
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found.")

        for label, value in (
            ("fullname", update.fullname),
            ("email", update.email),
            ("phoneNumber", update.phone_number),
        ):
            if value is not None and not value.strip():
                raise ValidationError(f"{label} cannot be empty")

        if update.email is not None and update.email != account.email:
            owner = self.store.get_by_email(update.email)
            if owner is not None and owner.id != account.id:
                raise ConflictError("User already exists with this email.")

        photo_url = None
        if file is not None:
            try:
                encoded = encode_upload(file)
                photo_url = await self.uploader.upload(encoded.data_uri)
            except Exception as e:
                logger.error("Profile file upload failed: %s", e)
                raise UploadError("Failed to upload file") from e

        if update.fullname is not None:
            account.fullname = update.fullname
        if update.email is not None:
            account.email = update.email
        if update.phone_number is not None:
            account.phone_number = update.phone_number
        if update.bio is not None:
            account.bio = update.bio or None
        if update.skills is not None:
            account.skills = parse_skills(update.skills) if update.skills else []
        if photo_url is not None:
            account.profile_photo = photo_url

        self.store.save(account)
        logger.info("Profile updated", extra={"account_id": account.id})
        return account
