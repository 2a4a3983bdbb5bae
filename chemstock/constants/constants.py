"""
Global Constants

Non-business constants used throughout the application.
These are infrastructure/technical constants, not authorization rules.

Configuration values loaded from environment variables live in core.config.
"""

import uuid
from typing import Optional

# ============================================================================
# HTTP Headers
# ============================================================================

TRACE_HEADER_NAME = "x-request-id"
AUTHORIZATION_HEADER_NAME = "authorization"
APIKEY_HEADER_NAME = "apikey"


# ============================================================================
# Store Tables
# ============================================================================

# PostgREST paths (table names are configurable in core.config)
REST_PATH_PREFIX = "/rest/v1"
AUTH_USER_PATH = "/auth/v1/user"


# ============================================================================
# Response Metadata
# ============================================================================

COMPONENT_API = "api"


# ============================================================================
# Helper Functions
# ============================================================================

def normalize_trace_id(trace_id: Optional[str]) -> str:
    """
    Normalize trace ID, generate new one if missing/invalid.

    Args:
        trace_id: Incoming trace ID (may be None or empty)

    Returns:
        Stripped trace ID, or a new UUID4 string

    Example:
        >>> normalize_trace_id("  abc123 ")
        'abc123'
    """
    if not trace_id or not isinstance(trace_id, str) or not trace_id.strip():
        return str(uuid.uuid4())
    return trace_id.strip()


def short_request_id(trace_id: Optional[str]) -> str:
    """First 8 characters of a trace ID, for log prefixes."""
    return normalize_trace_id(trace_id)[:8]
