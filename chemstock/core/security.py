"""
Core Security Module

Request-level authentication helpers shared by the API layer and the
store/identity clients.

Role and permission checks live in chemstock.authorization (they need the
resolved state); this module only deals with the bearer credential.

Usage:
    from chemstock.core.security import require_auth, parse_bearer_token

    auth_header = require_auth(request.headers.get("Authorization"))
    token = parse_bearer_token(auth_header)
"""

import logging
from typing import Optional

from chemstock.core.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)


def parse_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """
    Extract bearer token from Authorization header.

    Returns:
        Token string or None if not a valid bearer token

    Example:
        >>> parse_bearer_token("Bearer abc123")
        'abc123'
        >>> parse_bearer_token("Basic abc123") is None
        True
    """
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2:
        return None

    if parts[0].lower() != "bearer":
        return None

    return parts[1]


def require_auth(auth_header: Optional[str]) -> str:
    """
    Require a bearer Authorization header.

    Returns:
        The header normalized to "Bearer <token>"

    Raises:
        NotAuthenticatedError: If the header is missing, empty or not a bearer token
    """
    if auth_header is None or not auth_header.strip():
        raise NotAuthenticatedError(details={"reason": "Missing Authorization header"})

    token = parse_bearer_token(auth_header)
    if token is None:
        raise NotAuthenticatedError(details={"reason": "Authorization header is not a bearer token"})

    return f"Bearer {token}"


def mask_token(auth_header: Optional[str]) -> str:
    """Short, log-safe representation of a credential."""
    token = parse_bearer_token(auth_header)
    if not token:
        return "<none>"
    return f"{token[:6]}…"
