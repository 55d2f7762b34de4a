"""JSON response envelopes: `{data}` for success, `{error}` for failures."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.pagination import PageMeta

T = TypeVar("T")

_ENVELOPE_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class DataResponse(BaseModel, Generic[T]):
    """Single-item (or plain list) envelope: `{ data: ... }`"""

    data: T

    model_config = _ENVELOPE_CONFIG


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], meta: {total, page, limit, pages} }`"""

    data: list[T]
    meta: PageMeta

    model_config = _ENVELOPE_CONFIG


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every AppException response: `{ error: {code, message} }`"""

    error: ErrorDetail


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Build a dict for ListResponse from one page of items and the full count."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        },
    }


def error_body(code: str, message: str) -> dict:
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()
