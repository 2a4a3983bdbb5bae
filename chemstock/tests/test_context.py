"""
Authorization Context Tests

Tests for the per-session state machine:
- UNRESOLVED -> RESOLVING -> RESOLVED transitions and the loading flag
- last-initiated resolution wins over a slower, older one
- results arriving after logout are discarded
- identity session events drive recomputation

Run: pytest chemstock/tests/test_context.py -v
"""

import asyncio

import pytest

from chemstock.authorization.context import AuthorizationContext
from chemstock.authorization.identity import IdentitySession
from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.constants.permissions import ALL_PERMISSIONS, Permission
from chemstock.constants.roles import Role
from chemstock.schemas.authorization import AuthorizationStatus
from chemstock.tests.fakes import FakeStore


class GatedStore(FakeStore):
    """FakeStore whose role lookups block until the user's gate is opened."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gates = {}

    def gate(self, user_id):
        self.gates[user_id] = asyncio.Event()
        return self.gates[user_id]

    async def fetch_role_rows(self, user_id, auth_header=None):
        gate = self.gates.get(user_id)
        if gate is not None:
            await gate.wait()
        return await super().fetch_role_rows(user_id, auth_header)


@pytest.fixture
def store():
    return GatedStore(
        roles={"alice": ["admin"], "bob": ["operator"]},
        permissions={"bob": ["view_products"]},
    )


@pytest.fixture
def context(store):
    return AuthorizationContext(AuthorizationResolver(store))


async def _until_waiting():
    # Let a scheduled task run up to its first suspension point
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_initial_snapshot_is_unresolved(context):
    snapshot = context.snapshot()

    assert snapshot.status == AuthorizationStatus.UNRESOLVED
    assert snapshot.state is None
    assert not snapshot.loading
    assert not context.has_permission("view_products")


@pytest.mark.asyncio
async def test_resolving_then_resolved(context, store):
    gate = store.gate("bob")
    task = asyncio.create_task(context.on_identity_changed("bob"))
    await _until_waiting()

    snapshot = context.snapshot()
    assert snapshot.status == AuthorizationStatus.RESOLVING
    assert snapshot.loading
    assert snapshot.state is None

    gate.set()
    await task

    snapshot = context.snapshot()
    assert snapshot.status == AuthorizationStatus.RESOLVED
    assert not snapshot.loading
    assert snapshot.state.role == Role.OPERATOR
    assert context.has_permission(Permission.VIEW_PRODUCTS)


@pytest.mark.asyncio
async def test_stale_resolution_does_not_overwrite_newer(context, store):
    """Slow A started first, fast B second: B must be retained."""
    gate_alice = store.gate("alice")
    task_alice = asyncio.create_task(context.on_identity_changed("alice"))
    await _until_waiting()

    await context.on_identity_changed("bob")
    assert context.state.role == Role.OPERATOR

    gate_alice.set()
    await task_alice

    assert context.user_id == "bob"
    assert context.state.role == Role.OPERATOR
    assert context.state.permissions == {Permission.VIEW_PRODUCTS}
    assert not context.loading


@pytest.mark.asyncio
async def test_logout_discards_in_flight_result(context, store):
    gate = store.gate("alice")
    task = asyncio.create_task(context.on_identity_changed("alice"))
    await _until_waiting()

    await context.on_identity_changed(None)
    gate.set()
    await task

    snapshot = context.snapshot()
    assert snapshot.status == AuthorizationStatus.UNRESOLVED
    assert snapshot.state is None
    assert snapshot.user_id is None
    assert not snapshot.loading


@pytest.mark.asyncio
async def test_refresh_picks_up_admin_changes(context, store):
    await context.on_identity_changed("bob")
    assert not context.has_role_at_least(Role.ANALYST)

    store.roles["bob"] = ["operator", "analyst"]
    await context.refresh()

    assert context.has_role_at_least(Role.ANALYST)


@pytest.mark.asyncio
async def test_lookup_failure_resolves_to_degraded_viewer():
    failing = FakeStore(roles={"bob": ["admin"]}, role_error=RuntimeError("boom"))
    context = AuthorizationContext(AuthorizationResolver(failing))

    await context.on_identity_changed("bob")

    assert context.status == AuthorizationStatus.RESOLVED
    assert context.state.role == Role.VIEWER
    assert context.state.permissions == frozenset()
    assert context.state.degraded


@pytest.mark.asyncio
async def test_identity_session_drives_context(context):
    session = IdentitySession()
    context.attach(session)

    await session.sign_in("alice")
    assert session.current_user_id == "alice"
    assert context.state.permissions == ALL_PERMISSIONS

    await session.sign_out()
    assert context.status == AuthorizationStatus.UNRESOLVED

    context.detach()
    await session.resume("bob")
    assert context.status == AuthorizationStatus.UNRESOLVED


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", "   ", "\t"])
async def test_blank_identity_is_treated_as_logged_out(context, store, user_id):
    await context.on_identity_changed("bob", auth_header="Bearer bob-token")

    await context.on_identity_changed(user_id)

    snapshot = context.snapshot()
    assert snapshot.status == AuthorizationStatus.UNRESOLVED
    assert snapshot.user_id is None
    assert snapshot.state is None
    assert not snapshot.loading
    assert store.calls == [("roles", "bob"), ("permissions", "bob")]


@pytest.mark.asyncio
async def test_blank_identity_from_session_does_not_raise(context, store):
    session = IdentitySession()
    context.attach(session)

    await session.sign_in("   ")

    assert context.status == AuthorizationStatus.UNRESOLVED
    assert not context.loading
    assert store.calls == []


@pytest.mark.asyncio
async def test_credential_follows_identity(context, store):
    await context.on_identity_changed("alice", auth_header="Bearer alice-token")
    await context.on_identity_changed("bob")
    await context.on_identity_changed("bob", auth_header="Bearer bob-token")
    await context.refresh()

    assert store.credentials == [
        ("alice", "Bearer alice-token"),
        ("bob", None),
        ("bob", "Bearer bob-token"),
        ("bob", "Bearer bob-token"),
    ]


@pytest.mark.asyncio
async def test_stale_resolution_keeps_its_own_credential(context, store):
    gate_alice = store.gate("alice")
    task_alice = asyncio.create_task(
        context.on_identity_changed("alice", auth_header="Bearer alice-token")
    )
    await _until_waiting()

    await context.on_identity_changed("bob", auth_header="Bearer bob-token")
    gate_alice.set()
    await task_alice

    assert ("alice", "Bearer alice-token") in store.credentials
    assert ("bob", "Bearer bob-token") in store.credentials
    assert context.user_id == "bob"


@pytest.mark.asyncio
async def test_identity_session_passes_credential(context, store):
    session = IdentitySession()
    context.attach(session)

    await session.sign_in("bob", auth_header="Bearer bob-token")
    assert session.auth_header == "Bearer bob-token"
    assert store.credentials == [("bob", "Bearer bob-token")]

    await session.sign_out()
    assert session.auth_header is None
    assert context.status == AuthorizationStatus.UNRESOLVED
