"""
Authorization Context

Single-writer owner of one session's UserAuthorizationState.

State machine:
    UNRESOLVED --(login / resume)--> RESOLVING --(fetch settles)--> RESOLVED
    any state  --(logout or blank identity)--> UNRESOLVED

Each resolution attempt takes a generation number. A result is applied only
if its generation is still the latest issued one, so a slow resolution for
a previous identity can never overwrite a newer one, and results arriving
after logout are dropped.

Consumers read snapshot() synchronously; they never mutate the state.
"""

import logging
from typing import Optional

from chemstock.authorization import predicates
from chemstock.authorization.identity import IdentitySession
from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.schemas.authorization import (
    AuthorizationSnapshot,
    AuthorizationStatus,
    UserAuthorizationState,
)

logger = logging.getLogger(__name__)


class AuthorizationContext:
    def __init__(self, resolver: Optional[AuthorizationResolver] = None):
        self._resolver = resolver or AuthorizationResolver()
        self._auth_header: Optional[str] = None
        self._generation = 0
        self._user_id: Optional[str] = None
        self._state: Optional[UserAuthorizationState] = None
        self._loading = False
        self._unsubscribe = None

    # ==================== Reads ====================

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def state(self) -> Optional[UserAuthorizationState]:
        return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def status(self) -> AuthorizationStatus:
        if self._user_id is None:
            return AuthorizationStatus.UNRESOLVED
        if self._state is None:
            return AuthorizationStatus.RESOLVING
        return AuthorizationStatus.RESOLVED

    def snapshot(self) -> AuthorizationSnapshot:
        return AuthorizationSnapshot(
            status=self.status,
            user_id=self._user_id,
            loading=self._loading,
            state=self._state,
        )

    def has_permission(self, permission) -> bool:
        return predicates.has_permission(self._state, permission)

    def has_any_permission(self, permissions) -> bool:
        return predicates.has_any_permission(self._state, permissions)

    def has_role_at_least(self, required_role) -> bool:
        return predicates.has_role_at_least(self._state, required_role)

    # ==================== Identity Events ====================

    def attach(self, session: IdentitySession) -> None:
        """Follow login/logout events of an identity session."""
        self.detach()
        self._unsubscribe = session.subscribe(self.on_identity_changed)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def on_identity_changed(
        self,
        user_id: Optional[str],
        auth_header: Optional[str] = None
    ) -> None:
        """
        Recompute the state wholesale for a new identity (None or blank =
        logged out). auth_header is the credential of that identity; it
        replaces whatever credential the previous identity used.
        """
        self._generation += 1

        if user_id is None or not str(user_id).strip():
            self._user_id = None
            self._state = None
            self._loading = False
            self._auth_header = None
            logger.debug("Authorization context reset (no identity)")
            return

        if user_id != self._user_id:
            self._state = None
        self._user_id = user_id
        self._auth_header = auth_header

        await self._resolve(self._generation, user_id, auth_header)

    async def refresh(self) -> None:
        """
        Re-resolve the current identity, e.g. after an administrator changed
        its role or permission assignments.
        """
        if self._user_id is None:
            return
        self._generation += 1
        await self._resolve(self._generation, self._user_id, self._auth_header)

    async def _resolve(
        self,
        generation: int,
        user_id: str,
        auth_header: Optional[str]
    ) -> None:
        self._loading = True
        state = await self._resolver.resolve_permissions(user_id, auth_header=auth_header)

        if generation != self._generation:
            logger.debug(
                f"Discarding stale authorization for user {user_id} "
                f"(generation {generation}, latest {self._generation})"
            )
            return

        self._state = state
        self._loading = False
        logger.info(
            f"Authorization resolved for user {user_id}: role={state.role.value} "
            f"permissions={len(state.permissions)} degraded={state.degraded}"
        )
