"""Schema Base — camelCase wire format and the success envelope.

Invariants:
    - Request and response bodies use camelCase keys; Python code uses snake_case
    - Unknown request keys are ignored, never an error
    - Every success body is {"success": true, "message": ..., "data": ...}
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
