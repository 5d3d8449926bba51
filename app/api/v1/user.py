"""Account endpoints: register, login, logout, profile update."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.api.v1.auth import get_current_account_id
from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import AccountError, InternalError, ValidationError
from app.core.security import SESSION_COOKIE_NAME, SESSION_TTL
from app.schemas.account import AccountResponse, AccountView, MessageResponse
from app.services.account_store import SqlAccountStore
from app.services.accounts import AccountService, LoginInput, ProfileUpdate, RegistrationInput
from app.services.media_upload import CloudinaryUploader, MediaUploader
from app.services.upload_encoder import read_upload

logger = logging.getLogger(__name__)
router = APIRouter()

INTERNAL_ERROR_MESSAGE = "Internal server error"


def get_media_uploader() -> MediaUploader:
    return CloudinaryUploader(get_settings())


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    uploader: Annotated[MediaUploader, Depends(get_media_uploader)],
) -> AccountService:
    return AccountService(SqlAccountStore(db), uploader, get_settings())


def error_response(message: str, status_code: int) -> JSONResponse:
    """JSON error body shared by every endpoint: {"message", "success": false}."""
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=message, success=False).model_dump(),
    )


def _handle_error(operation: str, e: Exception) -> JSONResponse:
    if not isinstance(e, AccountError):
        logger.exception("%s error: %s", operation, e)
        e = InternalError(INTERNAL_ERROR_MESSAGE)
    elif e.status_code >= 500:
        logger.error("%s failed: %s", operation, e.message)
    return error_response(e.message, e.status_code)


async def _read_login_input(request: Request) -> LoginInput:
    """Accept credentials as a JSON object or as form fields."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in ("multipart/form-data", "application/x-www-form-urlencoded"):
        form = await request.form()
        body = {k: v for k, v in form.items() if isinstance(v, str)}
    else:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError("All fields are required") from e
        if not isinstance(body, dict):
            raise ValidationError("All fields are required")

    def field(name: str) -> str | None:
        value = body.get(name)
        return value if isinstance(value, str) else None

    return LoginInput(email=field("email"), password=field("password"), role=field("role"))


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
    service: Annotated[AccountService, Depends(get_account_service)],
    fullname: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    phone_number: Annotated[str | None, Form(alias="phoneNumber")] = None,
    password: Annotated[str | None, Form()] = None,
    role: Annotated[str | None, Form()] = None,
    file: Annotated[UploadFile | None, File()] = None,
):
    """
    Create an account. Multipart form with fullname, email, phoneNumber,
    password, role and a profile photo in `file`.
    """
    try:
        uploaded = await read_upload(file)
        await service.register(
            RegistrationInput(
                fullname=fullname,
                email=email,
                phone_number=phone_number,
                password=password,
                role=role,
            ),
            uploaded,
        )
    except Exception as e:
        return _handle_error("Registration", e)
    return MessageResponse(message="Account created successfully.")


@router.post("/login", response_model=AccountResponse)
async def login(
    request: Request,
    response: Response,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """
    Authenticate with email, password and role (JSON or form).
    On success the session token is set as an http-only `token` cookie.
    """
    try:
        result = await service.login(await _read_login_input(request))
    except Exception as e:
        return _handle_error("Login", e)

    response.set_cookie(
        SESSION_COOKIE_NAME,
        result.token,
        max_age=int(SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="strict",
    )
    return AccountResponse(
        message=f"Welcome back {result.account.fullname}",
        user=AccountView.from_account(result.account),
    )


@router.get("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """Expire the session cookie. Succeeds with or without a prior session."""
    try:
        message = service.logout()
    except Exception as e:
        return _handle_error("Logout", e)
    response.set_cookie(SESSION_COOKIE_NAME, "", max_age=0)
    return MessageResponse(message=message)


async def _read_profile_form(request: Request) -> tuple[ProfileUpdate, StarletteUploadFile | None]:
    """
    Read the multipart form directly so that a field sent empty ("") is kept
    distinct from a field that was not sent at all.
    """
    form = await request.form()

    def field(name: str) -> str | None:
        value = form.get(name)
        return value if isinstance(value, str) else None

    file = form.get("file")
    update = ProfileUpdate(
        fullname=field("fullname"),
        email=field("email"),
        phone_number=field("phoneNumber"),
        bio=field("bio"),
        skills=field("skills"),
    )
    return update, (file if isinstance(file, StarletteUploadFile) else None)


@router.post("/profile/update", response_model=AccountResponse)
async def update_profile(
    request: Request,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """
    Update the caller's profile (multipart form). Only fields present in the form
    are changed: fullname, email, phoneNumber, bio and `skills` (comma-separated).
    An uploaded `file` replaces the profile photo.
    """
    try:
        update, file = await _read_profile_form(request)
        account = await service.update_profile(account_id, update, await read_upload(file))
    except Exception as e:
        return _handle_error("Update profile", e)
    return AccountResponse(
        message="Profile updated successfully.",
        user=AccountView.from_account(account),
    )
