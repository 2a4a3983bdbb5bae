"""
Core Package

Centralized configuration, logging, error handling, and request security
utilities for the ChemStock authorization service.

Modules:
- config: Environment configuration and settings
- logging: Structured logging with trace_id support
- errors: Standardized error classes and HTTP conversion
- security: Bearer credential helpers

Usage:
    from chemstock.core import settings, setup_logging, set_trace_id
    from chemstock.core import ForbiddenError, NotAuthenticatedError
"""

# Configuration
from chemstock.core.config import settings, get_settings

# Logging
from chemstock.core.logging import (
    setup_logging,
    set_trace_id,
    get_trace_id
)

# Errors
from chemstock.core.errors import (
    AppError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    NotAuthenticatedError,
    LookupFailureError,
    UnknownPermissionTagError,
    UnknownRoleError,
    error_payload,
    from_http_exception,
    to_http_exception
)

# Security
from chemstock.core.security import (
    require_auth,
    parse_bearer_token,
    mask_token
)

__all__ = [
    # Config
    "settings",
    "get_settings",

    # Logging
    "setup_logging",
    "set_trace_id",
    "get_trace_id",

    # Errors
    "AppError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ServiceUnavailableError",
    "NotAuthenticatedError",
    "LookupFailureError",
    "UnknownPermissionTagError",
    "UnknownRoleError",
    "error_payload",
    "from_http_exception",
    "to_http_exception",

    # Security
    "require_auth",
    "parse_bearer_token",
    "mask_token",
]
