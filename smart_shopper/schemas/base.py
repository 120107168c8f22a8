from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case attributes"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[T]):
    """`{success, data}` wrapper used by the non-widget endpoints"""

    success: bool = True
    data: T


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class Timestamped(CamelModel):
    timestamp: datetime = Field(default_factory=utc_now)
