"""
Exception hierarchy for the price list engine.
Errors are reduced to Problem Details style dicts (RFC 7807) for user notices.
"""

from typing import Any, Dict, Optional

NOT_FOUND = 404
UNPROCESSABLE_ENTITY = 422
INTERNAL_ERROR = 500
BAD_GATEWAY = 502


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, NOT_FOUND, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, UNPROCESSABLE_ENTITY, details)


class GatewayError(AppError):
    """The mutation gateway reported a failed write."""
    def __init__(self, message: str = "Gateway call failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, BAD_GATEWAY, details)


class ExportError(AppError):
    """Rendering or encoding an export failed."""
    def __init__(self, message: str = "Export failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, INTERNAL_ERROR, details)


def to_problem(exc: Exception) -> Dict[str, Any]:
    """Reduce any exception to a problem-details dict."""
    if isinstance(exc, AppError):
        return {
            "code": exc.__class__.__name__,
            "message": exc.message,
            "status": exc.status_code,
            "details": exc.details,
        }

    return {
        "code": "InternalError",
        "message": "An unexpected error occurred. Please try again later.",
        "status": INTERNAL_ERROR,
        "details": {"error": str(exc)},
    }
