from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from socialfeed.core.responses import ApiResponse
from socialfeed.core.validation import USERNAME_PATTERN, clean_text
from socialfeed.modules.user_management.schemas.user import MAX_NAME_LENGTH, UserPublic

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

class RegisterRequest(BaseModel):
    username: str
    email: EmailStr
    password: str
    name: Optional[str] = None

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v):
        v = clean_text(v)
        if not isinstance(v, str) or not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must be 3-30 characters and contain only letters, numbers, and underscores"
            )
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(v) > MAX_PASSWORD_LENGTH:
            raise ValueError(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters")
        return v

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        v = clean_text(v)
        if v == "":
            return None
        if isinstance(v, str) and len(v) > MAX_NAME_LENGTH:
            raise ValueError(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")
        return v

class LoginRequest(BaseModel):
    username: str  # username or email
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v):
        v = clean_text(v)
        if v == "":
            raise ValueError("Username or email is required")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v

class AuthResponse(ApiResponse[UserPublic]):
    """User plus a freshly issued access token"""
    token: str
