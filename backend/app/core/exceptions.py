"""
Application exception hierarchy.

Services raise these; the handlers registered in app.main turn every one of
them into a JSON body of the form {"error": message} with the class's
HTTP status code.

    BlogAPIError (base)
    ├── ValidationError          → 400
    ├── DuplicateEmailError      → 400
    ├── InvalidCredentialsError  → 401
    ├── UnauthorizedError        → 401
    │   └── InvalidTokenError    → 401
    ├── NotFoundError            → 404
    └── InternalError            → 500
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """Client input is missing or references rows that do not exist."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateEmailError(BlogAPIError):
    status_code = 400
    default_message = "Email already registered"


class InvalidCredentialsError(BlogAPIError):
    """
    Login failed.

    Raised both for an unknown email and for a wrong password so callers
    cannot tell which accounts exist.
    """

    status_code = 401
    default_message = "Invalid email or password"


class UnauthorizedError(BlogAPIError):
    """A protected route was called without usable bearer credentials."""

    status_code = 401
    default_message = "Not authenticated"


class InvalidTokenError(UnauthorizedError):
    """Token signature is wrong, the token is malformed, or it has expired."""

    default_message = "Invalid or expired token"


class NotFoundError(BlogAPIError):
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource


class InternalError(BlogAPIError):
    status_code = 500
    default_message = "Internal server error"
