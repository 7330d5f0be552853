from typing import Optional
from datetime import datetime
from pydantic import field_validator

from socialfeed.core.responses import CamelModel
from socialfeed.core.validation import clean_text, validate_http_url
from socialfeed.modules.user_management.schemas.user import UserPublic

MAX_TEXT_LENGTH = 500

class PostCreate(CamelModel):
    text: str
    media_url: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, v):
        v = clean_text(v)
        if v == "":
            raise ValueError("Post text is required")
        if isinstance(v, str) and len(v) > MAX_TEXT_LENGTH:
            raise ValueError(f"Post text must not exceed {MAX_TEXT_LENGTH} characters")
        return v

    @field_validator("media_url", mode="before")
    @classmethod
    def validate_media_url(cls, v):
        if v is None:
            return None
        return validate_http_url(str(v).strip(), "Media URL")

class PostOut(CamelModel):
    """Post returned to client, with its author and like stats for the viewer"""
    id: str
    text: str
    media_url: Optional[str] = None
    author_id: str
    author: UserPublic
    like_count: int = 0
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime
