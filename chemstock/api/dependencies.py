"""
API Request Helpers

Shared extraction of trace id / credentials and caller authorization for the
routers. AppError raised by the resolver, clients or policy is converted to
HTTPException here so handlers stay linear.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Request

from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.constants.constants import (
    AUTHORIZATION_HEADER_NAME,
    COMPONENT_API,
    TRACE_HEADER_NAME,
    normalize_trace_id,
)
from chemstock.core.errors import AppError, to_http_exception
from chemstock.core.logging import get_trace_id as current_trace_id
from chemstock.core.logging import set_trace_id
from chemstock.schemas.authorization import UserAuthorizationState
from chemstock.schemas.base import ApiResponse, Proofs
from chemstock.tools import identity_client

logger = logging.getLogger(__name__)

_resolver: Optional[AuthorizationResolver] = None


def get_resolver() -> AuthorizationResolver:
    """Process-wide resolver bound to the store_client module."""
    global _resolver
    if _resolver is None:
        _resolver = AuthorizationResolver()
    return _resolver


def get_trace_id(request: Request) -> str:
    """
    Trace ID bound by the request middleware; extracted from the header
    (or generated) and bound here when the middleware did not run.
    """
    trace_id = current_trace_id()
    if trace_id == "-":
        trace_id = normalize_trace_id(request.headers.get(TRACE_HEADER_NAME))
        set_trace_id(trace_id)
    return trace_id


def get_auth_header(request: Request) -> Optional[str]:
    return request.headers.get(AUTHORIZATION_HEADER_NAME)


async def get_caller(request: Request) -> Tuple[str, UserAuthorizationState]:
    """
    Identify the caller and resolve their authorization.

    Raises:
        HTTPException: 401 when unauthenticated, 503 when the identity
            provider is unavailable. Store lookup failures do not raise;
            the caller is resolved as a degraded viewer.
    """
    auth_header = get_auth_header(request)
    try:
        user_id = await identity_client.get_user_id(auth_header)
        state = await get_resolver().resolve_permissions(user_id, auth_header=auth_header)
    except AppError as e:
        raise to_http_exception(e)
    return user_id, state


def enforce(check, *args) -> None:
    """Run a policy require_* function, converting denials to HTTPException."""
    try:
        check(*args)
    except AppError as e:
        raise to_http_exception(e)


def standard_response(
    message: str,
    data: Optional[Dict[str, Any]] = None,
    trace_id: Optional[str] = None,
    user_id: Optional[str] = None,
    state: Optional[UserAuthorizationState] = None,
    sources: Optional[list] = None,
) -> Dict[str, Any]:
    """Build standard response format."""
    proofs = Proofs(
        trace_id=trace_id,
        user_id=user_id,
        role=state.role.value if state else None,
        sources=sources,
        component=COMPONENT_API,
    )
    return ApiResponse(message=message, data=data or {}, proofs=proofs).model_dump(
        exclude_none=True
    )
