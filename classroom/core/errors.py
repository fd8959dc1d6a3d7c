"""
Error taxonomy shared by the access layer and the routers.

Every error is an ``HTTPException`` carrying its status code, so routers and
crud functions raise them directly and the handlers in ``classroom.main``
render them as ``{"message": ...}``.
"""
from typing import Optional

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError


class ValidationError(HTTPException):
    """Malformed or missing request fields."""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthenticationError(HTTPException):
    """Missing, invalid or expired token."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Valid token, but wrong role or no relation to the resource."""

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Unique constraint violation (duplicate email, join, submission)."""

    def __init__(self, detail: str = "Already exists"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StorageError(HTTPException):
    """The database could not serve the request."""

    def __init__(self, detail: str = "Storage unavailable"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def first_error_message(errors: list) -> str:
    """
    Turn a list of pydantic error dicts into a single human readable message

    Custom validators raise ``ValueError`` with a finished sentence; those are
    returned as is. Built-in constraint errors are prefixed with the field name.
    """
    if not errors:
        return "Validation error"
    error = errors[0]
    message = error.get("msg", "Validation error")
    if error.get("type") == "value_error":
        return message.removeprefix("Value error, ")

    field: Optional[str] = None
    for part in reversed(error.get("loc", ())):
        if isinstance(part, str) and part not in ("body", "query", "path"):
            field = part
            break
    return f"{field}: {message}" if field else message


def raise_validation_error(exc: PydanticValidationError):
    raise ValidationError(first_error_message(exc.errors())) from exc
