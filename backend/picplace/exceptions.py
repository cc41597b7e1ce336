"""
PicPlace Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure a request can hit.
Why:   Services raise domain errors; global handlers (main.py) map them to
       HTTP status codes and a stable JSON body. Internal details never leak.
How:   Each exception carries a user-safe message and an optional context
       dict that is logged server-side.

Exception Hierarchy:
    PicPlaceError (base)
    ├── ValidationError            → 422 (malformed input, failed precondition)
    │   └── GeocodeNotFoundError   → 422 (address could not be resolved)
    ├── ConflictError              → 422 (email already registered)
    ├── NotFoundError              → 404
    ├── UnauthorizedError          → 401 (bad credentials or token)
    ├── ForbiddenError             → 403 (not the owner of a place)
    ├── PersistenceError           → 500 (store operation failed)
    ├── UpstreamError              → 500
    │   └── GeocodeUnavailableError
    └── FileStorageError           → 500
"""

from typing import Any, Dict, Optional


class PicPlaceError(Exception):
    """
    Base exception for all PicPlace application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PicPlaceError):
    """
    Raised when client input fails a validation rule.

    HTTP 422. `context` holds JSON-safe details (field names and rule
    messages, never the submitted values).
    """

    def __init__(
        self,
        message: str = "Invalid inputs passed, please check your data.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class GeocodeNotFoundError(ValidationError):
    """The geocoding provider returned zero results for an address."""

    def __init__(self, address: Optional[str] = None):
        super().__init__(
            message="Could not find location for the specified address.",
            field="address",
        )
        # Kept off the response body; the address is user data
        self.address = address


class ConflictError(PicPlaceError):
    """Raised when a unique attribute (the user email) is already taken. HTTP 422."""

    def __init__(
        self,
        message: str = "User exists already, please login instead.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PicPlaceError):
    """
    Raised when a referenced entity does not exist.

    The repository returns None for missing rows; services convert that
    into NotFoundError so routes never deal with None.
    """

    def __init__(
        self,
        message: str = "The requested resource was not found.",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        ctx: Dict[str, Any] = {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UnauthorizedError(PicPlaceError):
    """Bad credentials, or a missing/invalid/expired bearer token. HTTP 401."""

    def __init__(self, message: str = "Invalid credentials, could not log you in."):
        super().__init__(message=message)


class ForbiddenError(PicPlaceError):
    """Authenticated, but acting on a place the caller does not own. HTTP 403."""

    def __init__(self, message: str = "You are not allowed to modify this place."):
        super().__init__(message=message)


class PersistenceError(PicPlaceError):
    """
    Raised when a database operation fails.

    The message returned to the client is always generic; the failing
    operation and exception type go into `context` for the logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamError(PicPlaceError):
    """A third-party service failed. HTTP 500."""

    def __init__(
        self,
        message: str = "An external service failed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodeUnavailableError(UpstreamError):
    """Network failure, timeout, bad status or malformed payload from the geocoder."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Location service is unavailable, please try again later.",
            context=context,
        )


class FileStorageError(PicPlaceError):
    """Could not write or read an uploaded image on the storage volume. HTTP 500."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
