"""
Client Tests

Tests for the store and identity HTTP clients with httpx.MockTransport:
- PostgREST query shape and header forwarding
- error mapping (LookupFailureError for reads, AppError subclasses for writes)
- resolver end-to-end over the real store client

Run: pytest chemstock/tests/test_clients.py -v
"""

import json

import httpx
import pytest

from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.constants.permissions import Permission
from chemstock.constants.roles import Role
from chemstock.core.errors import (
    AppError,
    ForbiddenError,
    LookupFailureError,
    NotAuthenticatedError,
    ServiceUnavailableError,
    UnknownPermissionTagError,
    UnknownRoleError,
)
from chemstock.tools import identity_client, store_client

BASE_URL = "https://chem.example.co"


# ==================== Fixtures ====================

@pytest.fixture
def transport(monkeypatch):
    """
    Install a MockTransport-backed client. Returns a function taking the
    request handler; captured requests are appended to install.requests.
    """
    monkeypatch.setenv("SUPABASE_URL", BASE_URL)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

    def install(handler):
        def recording_handler(request: httpx.Request):
            install.requests.append(request)
            return handler(request)

        store_client.set_client(
            httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        )

    install.requests = []
    yield install
    store_client.set_client(None)


# ==================== Reads ====================

@pytest.mark.asyncio
async def test_fetch_role_rows_query_and_headers(transport):
    transport(lambda request: httpx.Response(200, json=[{"role": "operator"}, {"role": "analyst"}]))

    rows = await store_client.fetch_role_rows("u1", auth_header="Bearer user-jwt")

    assert [r.role for r in rows] == ["operator", "analyst"]

    request = transport.requests[0]
    assert request.method == "GET"
    assert str(request.url).startswith(f"{BASE_URL}/rest/v1/user_roles")
    assert request.url.params["select"] == "role"
    assert request.url.params["user_id"] == "eq.u1"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer user-jwt"


@pytest.mark.asyncio
async def test_fetch_without_caller_uses_anon_key(transport):
    transport(lambda request: httpx.Response(200, json=[]))

    rows = await store_client.fetch_permission_rows("u1")

    assert rows == []
    request = transport.requests[0]
    assert request.url.params["select"] == "permission"
    assert request.headers["authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_fetch_http_error_is_lookup_failure(transport):
    transport(lambda request: httpx.Response(500, json={"message": "db down"}))

    with pytest.raises(LookupFailureError) as exc_info:
        await store_client.fetch_role_rows("u1")

    assert exc_info.value.details["status_code"] == 500


@pytest.mark.asyncio
async def test_fetch_transport_error_is_lookup_failure(transport):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport(handler)

    with pytest.raises(LookupFailureError):
        await store_client.fetch_permission_rows("u1")


@pytest.mark.asyncio
async def test_fetch_unexpected_payload_is_lookup_failure(transport):
    transport(lambda request: httpx.Response(200, json={"role": "admin"}))

    with pytest.raises(LookupFailureError):
        await store_client.fetch_role_rows("u1")


@pytest.mark.asyncio
async def test_list_role_assignments_query(transport):
    transport(lambda request: httpx.Response(
        200, json=[{"user_id": "u1", "role": "analyst"}, {"user_id": "u7", "role": "analyst"}]
    ))

    rows = await store_client.list_role_assignments("Analyst", auth_header="Bearer admin-jwt")

    assert [(r.user_id, r.role) for r in rows] == [("u1", "analyst"), ("u7", "analyst")]
    request = transport.requests[0]
    assert request.url.params["select"] == "user_id,role"
    assert request.url.params["role"] == "eq.analyst"
    assert request.url.params["order"] == "user_id.asc"
    assert "user_id" not in request.url.params


@pytest.mark.asyncio
async def test_list_role_assignments_unknown_role(transport):
    transport(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(UnknownRoleError):
        await store_client.list_role_assignments("superuser")

    assert transport.requests == []


# ==================== Writes ====================

@pytest.mark.asyncio
async def test_grant_permission_payload(transport):
    transport(lambda request: httpx.Response(201))

    await store_client.grant_permission(
        "u2", "approve_products", granted_by="admin-1", auth_header="Bearer admin-jwt"
    )

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/rest/v1/user_permissions"
    assert json.loads(request.content) == {
        "user_id": "u2",
        "permission": "approve_products",
        "granted_by": "admin-1",
    }
    assert request.headers["prefer"] == "return=minimal"


@pytest.mark.asyncio
async def test_grant_unknown_permission_rejected_before_request(transport):
    transport(lambda request: httpx.Response(201))

    with pytest.raises(UnknownPermissionTagError):
        await store_client.grant_permission("u2", "launch_rockets")

    assert transport.requests == []


@pytest.mark.asyncio
async def test_remove_user_role_filters(transport):
    transport(lambda request: httpx.Response(204))

    await store_client.remove_user_role("u2", Role.ANALYST, auth_header="Bearer admin-jwt")

    request = transport.requests[0]
    assert request.method == "DELETE"
    assert request.url.params["user_id"] == "eq.u2"
    assert request.url.params["role"] == "eq.analyst"


@pytest.mark.asyncio
async def test_write_errors_are_mapped(transport):
    transport(lambda request: httpx.Response(403, json={"message": "RLS violation"}))
    with pytest.raises(ForbiddenError):
        await store_client.add_user_role("u2", "admin")

    transport(lambda request: httpx.Response(409, json={"message": "duplicate key"}))
    with pytest.raises(AppError) as exc_info:
        await store_client.add_user_role("u2", "admin")
    assert exc_info.value.status_code == 409

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport(refuse)
    with pytest.raises(ServiceUnavailableError):
        await store_client.revoke_permission("u2", Permission.VIEW_REPORTS)


# ==================== Identity ====================

@pytest.mark.asyncio
async def test_get_user_id(transport):
    transport(lambda request: httpx.Response(200, json={"id": "user-42", "email": "a@b.c"}))

    assert await identity_client.get_user_id("Bearer user-jwt") == "user-42"
    assert str(transport.requests[0].url) == f"{BASE_URL}/auth/v1/user"


@pytest.mark.asyncio
async def test_get_user_id_rejected_token(transport):
    transport(lambda request: httpx.Response(401, json={"message": "invalid JWT"}))

    with pytest.raises(NotAuthenticatedError):
        await identity_client.get_user_id("Bearer expired")


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "Basic abc"])
async def test_get_user_id_requires_bearer(transport, header):
    transport(lambda request: httpx.Response(200, json={"id": "x"}))

    with pytest.raises(NotAuthenticatedError):
        await identity_client.get_user_id(header)

    assert transport.requests == []


# ==================== Resolver over HTTP ====================

@pytest.mark.asyncio
async def test_resolver_over_store_client(transport):
    def handler(request):
        if request.url.path.endswith("/user_roles"):
            return httpx.Response(200, json=[{"role": "operator"}])
        return httpx.Response(
            200, json=[{"permission": "view_products"}, {"permission": "bogus_tag"}]
        )

    transport(handler)

    state = await AuthorizationResolver().resolve_permissions("u1", auth_header="Bearer jwt")

    assert state.role == Role.OPERATOR
    assert state.permissions == {Permission.VIEW_PRODUCTS}
    assert not state.degraded
    assert [r.url.path for r in transport.requests] == [
        "/rest/v1/user_roles",
        "/rest/v1/user_permissions",
    ]


@pytest.mark.asyncio
async def test_resolver_over_failing_store(transport):
    transport(lambda request: httpx.Response(503))

    state = await AuthorizationResolver().resolve_permissions("u1")

    assert state.role == Role.VIEWER
    assert state.permissions == frozenset()
    assert state.degraded
