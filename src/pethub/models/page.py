from pydantic import BaseModel
from typing import Generic, TypeVar

T = TypeVar("T")

class Page(BaseModel, Generic[T]):
    items: list[T]
    next_page: int | None = None


def paginate(items: list, page: int, limit: int) -> Page:
    """Slices an already filtered and sorted result set into one page."""
    start = page * limit
    end = start + limit
    next_page = page + 1 if end < len(items) else None
    return Page(items=items[start:end], next_page=next_page)
