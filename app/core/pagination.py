"""Pagination and sorting parameters for list endpoints."""

from fastapi import Query
from pydantic import BaseModel

# Columns a caller may sort vendor requests by; anything else is a 422
SORTABLE_FIELDS = ("created_at", "updated_at", "vendor_name", "vendor_email", "status")
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=created_at&order=desc`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
        sort: str = Query(
            default="created_at",
            pattern=f"^({'|'.join(SORTABLE_FIELDS)})$",
            description="Sort field",
        ),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    """`meta` block of a ListResponse; `pages` is 0 for an empty result."""

    total: int
    page: int
    limit: int
    pages: int
