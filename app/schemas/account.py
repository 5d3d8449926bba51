"""Request/response schemas for the account lifecycle endpoints."""

from pydantic import BaseModel, Field

from app.models.account import Account


class ProfileView(BaseModel):
    """Profile sub-record of an account."""

    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    profile_photo: str | None = Field(default=None, alias="profilePhoto")

    class Config:
        populate_by_name = True


class AccountView(BaseModel):
    """Redacted account: everything except the password hash."""

    id: int = Field(..., alias="_id")
    fullname: str
    email: str
    phone_number: str = Field(..., alias="phoneNumber")
    role: str
    profile: ProfileView

    class Config:
        populate_by_name = True

    @classmethod
    def from_account(cls, account: Account) -> "AccountView":
        return cls(
            id=account.id,
            fullname=account.fullname,
            email=account.email,
            phone_number=account.phone_number,
            role=account.role,
            profile=ProfileView(
                bio=account.bio,
                skills=list(account.skills or []),
                profile_photo=account.profile_photo,
            ),
        )


class MessageResponse(BaseModel):
    """Body for responses that only confirm an action (register, logout) or report an error."""

    message: str
    success: bool = True


class AccountResponse(BaseModel):
    """Body for login and profile update: message plus the redacted account."""

    message: str
    user: AccountView
    success: bool = True
