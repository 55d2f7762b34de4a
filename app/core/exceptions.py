"""Application-level exceptions and FastAPI exception handlers."""


from enum import Enum
from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.response import error_body

EnumT = TypeVar("EnumT", bound=Enum)

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | int | None = None):
        msg = f"{entity} not found" if entity_id is None else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class ValidationInputError(AppException):
    """Malformed caller input (unknown enum value, out-of-range number, ...)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")

class InvitationExpiredError(AppException):
    def __init__(self, message: str = "Invitation link has expired"):
        super().__init__(message, status_code=410, code="INVITATION_EXPIRED")

class TemplateNotFoundError(AppException):
    """No follow-up template exists for a type at any escalation level."""

    def __init__(self, follow_up_type: str):
        super().__init__(
            f"No template found for type: {follow_up_type}",
            status_code=404,
            code="TEMPLATE_NOT_FOUND",
        )
        self.follow_up_type = follow_up_type

class MessageGenerationError(AppException):
    """Raised by a message generator when the upstream model call fails."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502, code="AI_GENERATION_ERROR")

def parse_enum(enum_cls: type[EnumT], value: str | EnumT, field: str = "value") -> EnumT:
    """Parse *value* into *enum_cls*, raising ValidationInputError when it is unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationInputError(
            f"Invalid {field} '{value}'. Allowed values: {allowed}"
        ) from None

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
