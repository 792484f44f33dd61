"""
Common Schemas

Base model and the response envelopes shared by every endpoint.

Wire format is camelCase; Python attributes stay snake_case. Input models
accept either spelling.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, readable from ORM rows."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"success": true, "data": ...}``."""
    success: bool = True
    data: T


class PageResponse(BaseModel, Generic[T]):
    """Success envelope for paginated lists."""
    success: bool = True
    data: List[T]
    pagination: Pagination


class MessageData(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope produced by the exception handlers in main.py."""
    error: str
    message: Optional[str] = None
    details: Optional[List[Dict[str, Any]]] = None
