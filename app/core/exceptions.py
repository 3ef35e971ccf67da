"""
Domain exceptions raised by the service layer.

Each carries the HTTP status and machine-readable code it is rendered with by
the handlers in app.middleware.exceptions.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base class for errors that surface to the caller as structured failures."""
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(AppException):
    """Malformed or policy-violating input, e.g. a quiz without a correct option."""
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AuthenticationError(AppException):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class AuthorizationError(AppException):
    """The caller is authenticated but lacks rights for the entity's current state."""
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "You do not have permission to perform this action."):
        super().__init__(message)


class NotFoundError(AppException):
    """Entity is absent, or hidden from this caller. The two are indistinguishable."""
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ExternalServiceError(AppException):
    status_code = 502
    code = "BAD_GATEWAY"

    def __init__(self, message: str = "Upstream service failed"):
        super().__init__(message)
