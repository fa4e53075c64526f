"""Paged result wrapper returned by every repository page query."""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    """
    One window of a filtered, ordered result set.

    Attributes:
        current_page: 1-based page number that was requested
        page_size: Requested page size
        total_row_count: Size of the full filtered set, independent of the window
        results: Entities in this window, at most page_size of them
    """

    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_row_count: int = Field(..., ge=0)
    results: List[T] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return -(-self.total_row_count // self.page_size)

    @property
    def has_next(self) -> bool:
        return self.current_page < self.page_count

    @property
    def is_empty(self) -> bool:
        return not self.results
