"""
Shared schema building blocks.

WHY: The public wire format is camelCase (``receiptId``, ``clientInfo``);
Python code uses snake_case. ``CamelModel`` accepts either on input and
emits camelCase on output.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class Pagination(CamelModel):
    """Pagination metadata for list endpoints (1-based pages)."""

    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, page_size: int, total: int, pages: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=pages,
            total_items=total,
            page_size=page_size,
            has_next_page=page < pages,
            has_prev_page=page > 1,
        )


class PaginatedResponse(CamelModel, Generic[T]):
    items: List[T]
    pagination: Pagination


class MessageResponse(CamelModel):
    message: str = Field(description="Human-readable result")
