"""
Resolver Tests

Tests for AuthorizationResolver against an in-memory store:
- effective role (default, max by rank)
- admin override and exact grant sets
- lookup failures degrade to viewer / no permissions
- unknown tags are dropped

Run: pytest chemstock/tests/test_resolver.py -v
"""

import logging

import httpx
import pytest

from chemstock.authorization.predicates import has_any_permission, has_permission
from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.constants.permissions import ALL_PERMISSIONS, Permission
from chemstock.constants.roles import Role
from chemstock.core.errors import LookupFailureError, NotAuthenticatedError


# ==================== resolve_role ====================

@pytest.mark.asyncio
async def test_resolve_role_defaults_to_viewer(fake_store):
    resolver = AuthorizationResolver(fake_store())

    assert await resolver.resolve_role("user-1") == Role.VIEWER


@pytest.mark.asyncio
async def test_resolve_role_returns_highest(fake_store):
    resolver = AuthorizationResolver(fake_store(roles={"user-1": ["operator", "analyst"]}))

    assert await resolver.resolve_role("user-1") == Role.ANALYST


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", [None, "", "   "])
async def test_resolve_role_requires_identity(fake_store, user_id):
    store = fake_store()
    resolver = AuthorizationResolver(store)

    with pytest.raises(NotAuthenticatedError):
        await resolver.resolve_role(user_id)

    # Short-circuits before contacting the store
    assert store.calls == []


@pytest.mark.asyncio
async def test_resolve_role_lookup_failure_is_logged(fake_store, caplog):
    resolver = AuthorizationResolver(fake_store(role_error=LookupFailureError()))

    with caplog.at_level(logging.DEBUG, logger="chemstock.authorization.resolver"):
        role = await resolver.resolve_role("user-1")

    assert role == Role.VIEWER
    assert any(
        r.levelno == logging.ERROR and "lookup failure" in r.getMessage().lower()
        for r in caplog.records
    )


@pytest.mark.asyncio
async def test_empty_roles_not_logged_as_failure(fake_store, caplog):
    resolver = AuthorizationResolver(fake_store())

    with caplog.at_level(logging.DEBUG, logger="chemstock.authorization.resolver"):
        await resolver.resolve_role("user-1")

    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.mark.asyncio
async def test_unknown_role_rows_are_dropped(fake_store):
    resolver = AuthorizationResolver(fake_store(roles={"user-1": ["superuser", "operator"]}))

    assert await resolver.resolve_role("user-1") == Role.OPERATOR


# ==================== resolve_permissions ====================

@pytest.mark.asyncio
async def test_admin_gets_full_vocabulary_without_grant_lookup(fake_store):
    store = fake_store(roles={"boss": ["admin"]}, permissions={"boss": ["view_products"]})
    resolver = AuthorizationResolver(store)

    state = await resolver.resolve_permissions("boss")

    assert state.role == Role.ADMIN
    assert state.permissions == ALL_PERMISSIONS
    assert ("permissions", "boss") not in store.calls


@pytest.mark.asyncio
async def test_admin_ignores_failing_grant_store(fake_store):
    store = fake_store(roles={"boss": ["admin"]}, permission_error=LookupFailureError())
    state = await AuthorizationResolver(store).resolve_permissions("boss")

    assert state.permissions == ALL_PERMISSIONS
    assert not state.degraded


@pytest.mark.asyncio
async def test_non_admin_gets_exact_grants(fake_store):
    grants = ["view_products", "create_movements"]
    resolver = AuthorizationResolver(
        fake_store(roles={"op": ["operator"]}, permissions={"op": grants})
    )

    first = await resolver.resolve_permissions("op")
    second = await resolver.resolve_permissions("op")

    assert first.role == Role.OPERATOR
    assert first.permissions == {Permission.VIEW_PRODUCTS, Permission.CREATE_MOVEMENTS}
    assert first == second


@pytest.mark.asyncio
async def test_role_fetched_before_permissions(fake_store):
    store = fake_store(roles={"op": ["operator"]}, permissions={"op": ["view_products"]})
    await AuthorizationResolver(store).resolve_permissions("op")

    assert store.calls == [("roles", "op"), ("permissions", "op")]


@pytest.mark.asyncio
async def test_unknown_permission_tags_are_dropped(fake_store, caplog):
    resolver = AuthorizationResolver(
        fake_store(permissions={"u": ["view_products", "launch_rockets"]})
    )

    with caplog.at_level(logging.WARNING, logger="chemstock.authorization.resolver"):
        state = await resolver.resolve_permissions("u")

    assert state.permissions == {Permission.VIEW_PRODUCTS}
    assert state.permissions <= ALL_PERMISSIONS
    assert any("launch_rockets" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_role_lookup_failure_degrades_to_viewer(fake_store):
    store = fake_store(
        role_error=httpx.ConnectError("store down"),
        permissions={"u": ["view_products"]},
    )
    state = await AuthorizationResolver(store).resolve_permissions("u")

    assert state.role == Role.VIEWER
    assert state.permissions == frozenset()
    assert state.degraded
    # Grants are never trusted after a failed role lookup
    assert ("permissions", "u") not in store.calls


@pytest.mark.asyncio
async def test_permission_lookup_failure_degrades_to_viewer(fake_store):
    store = fake_store(roles={"u": ["analyst"]}, permission_error=LookupFailureError())
    state = await AuthorizationResolver(store).resolve_permissions("u")

    assert state.role == Role.VIEWER
    assert state.permissions == frozenset()
    assert state.degraded


# ==================== End-to-end Scenarios ====================

@pytest.mark.asyncio
async def test_scenario_no_rows(fake_store):
    state = await AuthorizationResolver(fake_store()).resolve_permissions("new-user")

    assert state.role == Role.VIEWER
    assert not has_permission(state, "view_products")


@pytest.mark.asyncio
async def test_scenario_admin_without_grants(fake_store):
    state = await AuthorizationResolver(
        fake_store(roles={"boss": ["admin"]})
    ).resolve_permissions("boss")

    assert has_permission(state, "delete_invoices")


@pytest.mark.asyncio
async def test_scenario_operator_with_grants(fake_store):
    store = fake_store(
        roles={"op": ["operator"]},
        permissions={"op": ["view_products", "create_movements"]},
    )
    state = await AuthorizationResolver(store).resolve_permissions("op")

    assert has_any_permission(state, ["edit_products", "create_movements"])
    assert not has_permission(state, "edit_products")
