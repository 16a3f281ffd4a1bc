"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.users import UserResponse


class RegisterRequest(BaseModel):
    """Patient self-registration payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    mobile: str = Field(..., min_length=7, max_length=20)
    password: str = Field(..., min_length=6, max_length=72)
    confirm_password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lower-cased."""
        return v.strip().lower()

    @field_validator("mobile")
    @classmethod
    def strip_spaces(cls, v: str) -> str:
        """Remove whitespace typed inside the number."""
        return "".join(v.split())


class LoginRequest(BaseModel):
    """Email and password login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Match the stored lower-cased email."""
        return v.strip().lower()


class LoginResponse(BaseModel):
    """Login response with token and user info."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
