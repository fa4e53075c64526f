"""Tests for the PagedResult wrapper."""

import pytest
from pydantic import ValidationError

from catalog.schemas.paging import PagedResult


@pytest.mark.parametrize("total, size, pages", [(0, 10, 0), (22, 10, 3), (20, 10, 2), (1, 1, 1)])
def test_page_count(total, size, pages):
    page = PagedResult(current_page=1, page_size=size, total_row_count=total)

    assert page.page_count == pages


def test_has_next_and_is_empty():
    middle = PagedResult(current_page=2, page_size=10, total_row_count=22, results=list(range(10)))
    beyond = PagedResult(current_page=9, page_size=10, total_row_count=22)

    assert middle.has_next and not middle.is_empty
    assert not beyond.has_next and beyond.is_empty


def test_invalid_window_rejected():
    with pytest.raises(ValidationError):
        PagedResult(current_page=0, page_size=10, total_row_count=0)
    with pytest.raises(ValidationError):
        PagedResult(current_page=1, page_size=10, total_row_count=-1)
