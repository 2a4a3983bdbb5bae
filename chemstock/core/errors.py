"""
Core Errors Module

Standardized error classes and helpers for consistent error handling across the service.
Provides conversion between internal errors, store responses and HTTP responses.

Authorization taxonomy:
- NotAuthenticatedError: no user identity; resolver short-circuits without store access
- LookupFailureError: role/permission fetch failed; resolver degrades to viewer
- UnknownPermissionTagError / UnknownRoleError: value outside the closed vocabulary

Usage:
    from chemstock.core.errors import ForbiddenError, error_payload

    raise ForbiddenError("Only administrators can manage users")

    payload = error_payload("not_authenticated", "Authentication required", trace_id="abc123")
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


# ==================== Base Error Class ====================

class AppError(Exception):
    """
    Base application error class.

    All custom errors inherit from this class so the API exception handler
    can render them uniformly.

    Attributes:
        code: Error code (e.g., "lookup_failure", "forbidden")
        message: Human-readable error message
        details: Optional additional error context
        status_code: HTTP status code for this error type
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._default_code()
        self.details = details or {}
        self.status_code = status_code

    def _default_code(self) -> str:
        """snake_case class name without the "Error" suffix."""
        name = self.__class__.__name__
        if name.endswith("Error"):
            name = name[:-5]

        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())

        return "".join(result)

    def to_dict(self, trace_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON responses.

        Args:
            trace_id: Optional request trace ID

        Returns:
            Error dict with code, message, details, trace_id
        """
        return error_payload(self.code, self.message, self.details, trace_id)


# ==================== HTTP Error Classes ====================

class ValidationError(AppError):
    """Validation error (400 Bad Request)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        code: str = "validation_error"
    ):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=400
        )


class UnauthorizedError(AppError):
    """Unauthorized error (401 Unauthorized)."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None,
        code: str = "unauthorized"
    ):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=401
        )


class ForbiddenError(AppError):
    """
    Forbidden error (403 Forbidden).

    Raised when an explicit user action fails a permission or role check.
    This is the only authorization error meant to reach the end user.
    """

    def __init__(
        self,
        message: str = "Access denied",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="forbidden",
            details=details,
            status_code=403
        )


class NotFoundError(AppError):
    """Not found error (404 Not Found)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="not_found",
            details=details,
            status_code=404
        )


class ServiceUnavailableError(AppError):
    """Service unavailable error (503), backend store unreachable or failing."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: Optional[Dict[str, Any]] = None,
        code: str = "service_unavailable"
    ):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=503
        )


# ==================== Authorization Error Classes ====================

class NotAuthenticatedError(UnauthorizedError):
    """No user identity is available for the request or session."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, details=details, code="not_authenticated")


class LookupFailureError(ServiceUnavailableError):
    """
    Role or permission lookup against the relational store failed.

    The resolver recovers from this locally (viewer, no permissions); it is
    only surfaced by administrative endpoints that read the store directly.
    """

    def __init__(
        self,
        message: str = "Authorization lookup failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, details=details, code="lookup_failure")


class UnknownPermissionTagError(ValidationError):
    """A permission tag outside the closed vocabulary."""

    def __init__(
        self,
        message: str = "Unknown permission tag",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, details=details, code="unknown_permission_tag")


class UnknownRoleError(ValidationError):
    """A role tag outside the closed role set."""

    def __init__(
        self,
        message: str = "Unknown role",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, details=details, code="unknown_role")


# ==================== Helper Functions ====================

def error_payload(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    trace_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a standardized error payload dict.

    Example:
        >>> payload = error_payload("forbidden", "Access denied", trace_id="abc123")
        >>> payload["code"]
        'forbidden'
    """
    result = {
        "code": code,
        "message": message,
    }

    if details:
        result["details"] = details

    if trace_id:
        result["trace_id"] = trace_id

    return result


def from_http_exception(
    e: Exception,
    default_code: str = "store_error",
    safe_message: bool = True
) -> AppError:
    """
    Convert an HTTP exception to AppError.

    Maps httpx.HTTPStatusError (and anything carrying status_code/detail) to
    the matching AppError subclass. With safe_message=True the store's own
    error text is logged but replaced by a generic message.

    Args:
        e: Exception to convert
        default_code: Error code for unmapped status codes
        safe_message: Hide backend error details from callers

    Returns:
        AppError instance
    """
    status_code = getattr(e, "status_code", 500)
    detail = str(e)

    if hasattr(e, "detail"):
        detail = e.detail

    # httpx.HTTPStatusError carries the response
    response = getattr(e, "response", None)
    if response is not None:
        status_code = response.status_code
        try:
            error_data = response.json()
            if isinstance(error_data, dict):
                detail = error_data.get("message") or error_data.get("detail") or str(error_data)
        except ValueError:
            detail = response.text or f"HTTP {status_code}"

    if safe_message:
        if status_code == 401:
            detail = "Authentication required"
        elif status_code == 403:
            detail = "Access forbidden"
        elif status_code == 404:
            detail = "Resource not found"
        elif status_code == 409:
            detail = "Assignment already exists"
        elif status_code >= 500:
            logger.error(f"Store error ({status_code}): {detail}")
            detail = "Store error"

    if status_code == 400:
        return ValidationError(message=detail)
    elif status_code == 401:
        return UnauthorizedError(message=detail)
    elif status_code == 403:
        return ForbiddenError(message=detail)
    elif status_code == 404:
        return NotFoundError(message=detail)
    elif 500 <= status_code < 600:
        return ServiceUnavailableError(message=detail)
    else:
        return AppError(
            message=detail,
            code=default_code,
            status_code=status_code
        )


def to_http_exception(error: AppError):
    """
    Convert AppError to FastAPI HTTPException.

    Example:
        >>> from chemstock.core.errors import ForbiddenError, to_http_exception
        >>> to_http_exception(ForbiddenError()).status_code
        403
    """
    from fastapi import HTTPException
    from chemstock.core.logging import get_trace_id

    trace_id = get_trace_id()
    if trace_id == "-":
        trace_id = None

    return HTTPException(
        status_code=error.status_code,
        detail=error.to_dict(trace_id=trace_id)
    )
