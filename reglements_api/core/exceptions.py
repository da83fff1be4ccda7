"""Custom exceptions for the Reglements API"""

from typing import Any, Dict, List, Optional


class ReglementsAPIException(Exception):
    """Base exception for the Reglements API

    ``extra`` holds additional top-level fields for the error body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.extra = extra or {}
        super().__init__(self.message)


class DatabaseException(ReglementsAPIException):
    """Database-related exceptions"""

    def __init__(self, message: str = "Database operation failed", detail: Optional[str] = None):
        super().__init__(message, status_code=500, detail=detail)


class PoolExhaustedException(ReglementsAPIException):
    """No pooled connection became free within the acquire timeout"""

    def __init__(self, message: str = "Database connection pool exhausted", detail: Optional[str] = None):
        super().__init__(message, status_code=503, detail=detail)


class ValidationException(ReglementsAPIException):
    """Validation-related exceptions, optionally carrying one message per failed check"""

    def __init__(
        self,
        message: str = "Validation failed",
        detail: Optional[str] = None,
        errors: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=400, detail=detail, extra=extra)
        self.errors = errors or []


class NotFoundException(ReglementsAPIException):
    """Resource not found exceptions"""

    def __init__(self, message: str = "Resource not found", detail: Optional[str] = None):
        super().__init__(message, status_code=404, detail=detail)


class AuthenticationException(ReglementsAPIException):
    """Authentication-related exceptions"""

    def __init__(self, message: str = "Authentication failed", detail: Optional[str] = None):
        super().__init__(message, status_code=401, detail=detail)
