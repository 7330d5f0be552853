from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class ApiResponse(CamelModel, Generic[T]):
    """Success envelope returned by every endpoint"""
    success: bool = True
    message: Optional[str] = None
    data: T
    meta: Optional[Dict[str, Any]] = None

class DeletedResource(CamelModel):
    id: str
    deleted_at: str
