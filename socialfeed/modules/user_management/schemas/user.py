from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from socialfeed.core.responses import CamelModel
from socialfeed.core.validation import clean_text, validate_http_url

MAX_NAME_LENGTH = 100
MAX_BIO_LENGTH = 500

class UserPublic(CamelModel):
    """User projection returned to clients; has no password field"""
    id: str
    username: str
    email: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class UserStats(BaseModel):
    posts: int = 0
    followers: int = 0
    following: int = 0

class UserWithStats(UserPublic):
    stats: UserStats

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        v = clean_text(v)
        if isinstance(v, str) and len(v) > MAX_NAME_LENGTH:
            raise ValueError(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")
        return v

    @field_validator("bio", mode="before")
    @classmethod
    def validate_bio(cls, v):
        v = clean_text(v)
        if isinstance(v, str) and len(v) > MAX_BIO_LENGTH:
            raise ValueError(f"Bio must not exceed {MAX_BIO_LENGTH} characters")
        return v

    @field_validator("avatar", mode="before")
    @classmethod
    def validate_avatar(cls, v):
        if v is None:
            return None
        return validate_http_url(str(v).strip(), "Avatar") or ""
