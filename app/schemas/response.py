import math
from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict, List

DataType = TypeVar("DataType")
ItemType = TypeVar("ItemType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope every successful endpoint returns."""
    message: str = Field(..., description="A human-readable message about the response.")
    data: Optional[DataType] = Field(None, description="The payload, if any.")

class PaginatedResponse(BaseModel, Generic[ItemType]):
    items: List[ItemType]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, items: List[Any], total: int, page: int, size: int) -> "PaginatedResponse":
        pages = math.ceil(total / size) if size else 0
        return cls(
            items=items,
            total=total,
            page=page,
            size=size,
            pages=pages,
            has_next=page < pages,
            has_previous=page > 1,
        )

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable code, e.g. BAD_REQUEST or NOT_FOUND")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Per-field issues or other context")

class ErrorResponse(BaseModel):
    """Body of every failed request, whatever raised it."""
    error: ErrorDetail
    timestamp: str = Field(..., description="ISO 8601 timestamp of the failure")
    path: str = Field(..., description="Request URL that failed")
    request_id: Optional[str] = Field(None, description="Matches the X-Request-ID response header")
