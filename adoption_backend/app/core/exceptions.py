# app/core/exceptions.py
"""
Error taxonomy surfaced by the API.

Services raise these; the handlers registered in create_app turn them into the
``{"success": false, "message": ..., "errors": ...}`` envelope with a fixed
status code per kind.
"""
from typing import Any, Optional


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message: Optional[str] = None, errors: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class BadRequestError(ApiError):
    status_code = 400
    default_message = 'Bad Request'


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'


class DuplicateKeyError(Exception):
    """Raised by a store when a write collides with a unique key."""

    def __init__(self, field: str, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value entered for {field}")
