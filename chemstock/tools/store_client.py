"""
Relational Store HTTP Client

Async interface to the Supabase/PostgREST tables backing authorization.
Row-level security in the store is the server-side authority; the caller's
bearer token is forwarded so every query runs as that user.

Functions:
- fetch_role_rows: Role assignment rows for a user
- fetch_permission_rows: Individually granted permission rows for a user
- list_role_assignments: Role rows across users (optionally one role)
- add_user_role / remove_user_role: Role administration
- grant_permission / revoke_permission: Permission administration
- aclose_client: Close the HTTP client (call during app shutdown)

Reads raise LookupFailureError on any HTTP or transport failure (the
resolver degrades on it). Writes map HTTP failures through
from_http_exception so administrators see 401/403/404/503 as such.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from chemstock.constants.constants import (
    APIKEY_HEADER_NAME,
    AUTHORIZATION_HEADER_NAME,
    REST_PATH_PREFIX,
    TRACE_HEADER_NAME,
)
from chemstock.constants.permissions import parse_permission
from chemstock.constants.roles import parse_role
from chemstock.core.config import settings
from chemstock.core.errors import (
    LookupFailureError,
    ServiceUnavailableError,
    from_http_exception,
)
from chemstock.core.logging import get_trace_id
from chemstock.schemas.authorization import PermissionRow, RoleRow

logger = logging.getLogger(__name__)


# ============================================================================
# Module-level HTTP Client (Singleton with Connection Pooling)
# ============================================================================

_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    """
    Get or create the module-level httpx.AsyncClient singleton.

    Returns:
        Shared httpx.AsyncClient instance
    """
    global _client

    if _client is None or _client.is_closed:
        limits = httpx.Limits(
            max_connections=settings.STORE_CLIENT_MAX_CONNECTIONS,
            max_keepalive_connections=settings.STORE_CLIENT_MAX_KEEPALIVE
        )

        _client = httpx.AsyncClient(
            timeout=settings.STORE_CLIENT_TIMEOUT,
            limits=limits,
            follow_redirects=False
        )
        logger.info(f"Initialized store client for {settings.SUPABASE_URL}")

    return _client


def set_client(client: Optional[httpx.AsyncClient]) -> None:
    """Replace the shared client (tests inject an httpx.MockTransport client)."""
    global _client
    _client = client


async def aclose_client() -> None:
    """
    Close the module-level httpx.AsyncClient gracefully.
    Called from the FastAPI lifespan on shutdown.
    """
    global _client

    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Closed store client")
    _client = None


# ============================================================================
# Helper Functions
# ============================================================================


def _table_url(table: str) -> str:
    return f"{settings.SUPABASE_URL}{REST_PATH_PREFIX}/{table}"


def _build_headers(
    auth_header: Optional[str] = None,
    prefer: Optional[str] = None
) -> Dict[str, str]:
    """
    Build PostgREST headers.

    The caller's Authorization is forwarded; without one the anon key is
    used as bearer so RLS sees the anonymous role.
    """
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }

    api_key = settings.SUPABASE_ANON_KEY
    if api_key:
        headers[APIKEY_HEADER_NAME] = api_key

    if auth_header:
        headers[AUTHORIZATION_HEADER_NAME] = auth_header
    elif api_key:
        headers[AUTHORIZATION_HEADER_NAME] = f"Bearer {api_key}"

    if prefer:
        headers["Prefer"] = prefer

    trace_id = get_trace_id()
    if trace_id != "-":
        headers[TRACE_HEADER_NAME] = trace_id

    return headers


async def _select_rows(
    table: str,
    columns: str,
    filters: Dict[str, str],
    auth_header: Optional[str],
    order: Optional[str] = None
) -> List[Dict[str, Any]]:
    """GET `table` rows matching equality filters; any failure becomes LookupFailureError."""
    params = {"select": columns}
    params.update({column: f"eq.{value}" for column, value in filters.items()})
    if order:
        params["order"] = order
    details = {"table": table, **filters}

    try:
        client = get_client()
        response = await client.get(
            _table_url(table), params=params, headers=_build_headers(auth_header)
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        logger.warning(f"Store lookup on {table} returned {status_code}")
        raise LookupFailureError(details={**details, "status_code": status_code}) from e
    except httpx.HTTPError as e:
        logger.warning(f"Store lookup on {table} failed: {type(e).__name__}: {e}")
        raise LookupFailureError(details={**details, "reason": type(e).__name__}) from e
    except ValueError as e:
        logger.warning(f"Store lookup on {table} returned invalid JSON")
        raise LookupFailureError(details={**details, "reason": "invalid_json"}) from e

    if not isinstance(data, list):
        raise LookupFailureError(details={**details, "reason": "unexpected_payload"})

    return [row for row in data if isinstance(row, dict)]


async def _write(
    method: str,
    table: str,
    auth_header: Optional[str],
    params: Optional[Dict[str, str]] = None,
    payload: Optional[Dict[str, Any]] = None
) -> None:
    """Issue an insert/delete; map failures to AppError subclasses."""
    try:
        client = get_client()
        response = await client.request(
            method,
            _table_url(table),
            params=params,
            json=payload,
            headers=_build_headers(auth_header, prefer="return=minimal"),
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise from_http_exception(e) from e
    except httpx.HTTPError as e:
        logger.error(f"Store {method} on {table} failed: {type(e).__name__}: {e}")
        raise ServiceUnavailableError(
            message=f"Cannot connect to store: {type(e).__name__}",
            details={"table": table}
        ) from e


# ============================================================================
# Read API
# ============================================================================


async def fetch_role_rows(user_id: str, auth_header: Optional[str] = None) -> List[RoleRow]:
    """
    Fetch all role assignment rows for a user.

    Raises:
        LookupFailureError: On HTTP, transport or payload errors
    """
    rows = await _select_rows(
        settings.USER_ROLES_TABLE, "role", {"user_id": user_id}, auth_header
    )
    return [RoleRow(**row) for row in rows if row.get("role") is not None]


async def fetch_permission_rows(
    user_id: str,
    auth_header: Optional[str] = None
) -> List[PermissionRow]:
    """
    Fetch individually granted permission rows for a user.

    Raises:
        LookupFailureError: On HTTP, transport or payload errors
    """
    rows = await _select_rows(
        settings.USER_PERMISSIONS_TABLE, "permission", {"user_id": user_id}, auth_header
    )
    return [PermissionRow(**row) for row in rows if row.get("permission") is not None]


async def list_role_assignments(
    role=None,
    auth_header: Optional[str] = None
) -> List[RoleRow]:
    """
    Fetch role assignment rows across users, optionally for one role only.

    Raises:
        UnknownRoleError: If role is not in the role vocabulary
        LookupFailureError: On HTTP, transport or payload errors
    """
    filters = {}
    if role is not None:
        filters["role"] = parse_role(role).value

    rows = await _select_rows(
        settings.USER_ROLES_TABLE, "user_id,role", filters, auth_header, order="user_id.asc"
    )
    return [RoleRow(**row) for row in rows if row.get("role") is not None]


# ============================================================================
# Administration API
# ============================================================================


async def add_user_role(user_id: str, role, auth_header: Optional[str] = None) -> None:
    """Insert a role assignment for user_id."""
    role = parse_role(role)
    logger.info(f"Adding role {role.value} to user {user_id}")
    await _write(
        "POST",
        settings.USER_ROLES_TABLE,
        auth_header,
        payload={"user_id": user_id, "role": role.value},
    )


async def remove_user_role(user_id: str, role, auth_header: Optional[str] = None) -> None:
    """Delete a role assignment for user_id."""
    role = parse_role(role)
    logger.info(f"Removing role {role.value} from user {user_id}")
    await _write(
        "DELETE",
        settings.USER_ROLES_TABLE,
        auth_header,
        params={"user_id": f"eq.{user_id}", "role": f"eq.{role.value}"},
    )


async def grant_permission(
    user_id: str,
    permission,
    granted_by: Optional[str] = None,
    auth_header: Optional[str] = None
) -> None:
    """Insert an individual permission grant for user_id."""
    permission = parse_permission(permission)
    payload = {"user_id": user_id, "permission": permission.value}
    if granted_by:
        payload["granted_by"] = granted_by

    logger.info(f"Granting {permission.value} to user {user_id}")
    await _write("POST", settings.USER_PERMISSIONS_TABLE, auth_header, payload=payload)


async def revoke_permission(user_id: str, permission, auth_header: Optional[str] = None) -> None:
    """Delete an individual permission grant for user_id."""
    permission = parse_permission(permission)
    logger.info(f"Revoking {permission.value} from user {user_id}")
    await _write(
        "DELETE",
        settings.USER_PERMISSIONS_TABLE,
        auth_header,
        params={"user_id": f"eq.{user_id}", "permission": f"eq.{permission.value}"},
    )
