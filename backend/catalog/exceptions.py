"""
Coffee Catalog Backend: Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions, one per failure the API reports.
How:   Each exception carries a user-facing `message` and a `context` dict.
       Global handlers registered in main.py translate them into JSON error
       responses with the matching status code.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError       → 400 Bad Request
    ├── ForbiddenError        → 403 Forbidden
    ├── NotFoundError         → 404 Not Found
    ├── RequestTimeoutError   → 408 Request Timeout
    ├── TransactionError      → 500 Internal Server Error
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional, Union


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged, returned only where the
                  handler chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request. Also produced from FastAPI's
    RequestValidationError so schema and business-rule failures share one
    response shape.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ForbiddenError(CatalogError):
    """Raised by the API-key guard when the Authorization header is wrong or missing."""

    def __init__(
        self,
        message: str = "Forbidden resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    The store returns None for a missing row; the service converts that None
    into this exception so callers never receive an empty success value.

    Message format: "<Resource> <id> not found", e.g. "Coffee 7 not found".
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Union[str, int]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class RequestTimeoutError(CatalogError):
    """Raised when a request exceeds REQUEST_TIMEOUT_SECONDS. HTTP: 408."""

    def __init__(
        self,
        timeout: float = 3.0,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout_seconds"] = timeout
        super().__init__(
            message=f"Request did not complete within {timeout:g} seconds.",
            context=ctx,
        )
        self.timeout = timeout


class TransactionError(CatalogError):
    """
    Raised when a unit of work failed and was rolled back.

    Nothing written inside the unit of work is persisted. The original
    failure is chained as __cause__ and its type recorded in context.
    HTTP: 500.
    """

    def __init__(
        self,
        message: str = "The operation could not be completed and was rolled back.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatalogError):
    """
    Raised when the database is unreachable or a store operation fails.

    The response message is always generic; SQL details stay in the logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
