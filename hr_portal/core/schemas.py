from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, Field
from datetime import datetime, timezone

T = TypeVar("T")

class Pagination(BaseModel):
    current: int
    total: int
    count: int
    total_records: int

    @classmethod
    def build(cls, page: int, limit: int, count: int, total_records: int) -> "Pagination":
        pages = (total_records + limit - 1) // limit if limit else 0
        return cls(current=page, total=pages, count=count, total_records=total_records)

class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    pagination: Optional[Pagination] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None, pagination: Optional[Pagination] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message, pagination=pagination)
