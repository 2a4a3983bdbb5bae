"""
Identity Session

In-process view of the identity provider's session: who is signed in with
which credential, and a notification fan-out for login / session resume /
logout. Listeners receive the user id together with its bearer credential so
store lookups always run as that user.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str], Optional[str]], Awaitable[None]]


class IdentitySession:
    def __init__(self):
        self._user_id: Optional[str] = None
        self._auth_header: Optional[str] = None
        self._listeners: List[IdentityListener] = []

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def auth_header(self) -> Optional[str]:
        return self._auth_header

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """
        Register an async listener called as listener(user_id, auth_header);
        returns an unsubscribe callable.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, user_id: str, auth_header: Optional[str] = None) -> None:
        logger.info(f"Identity signed in: {user_id}")
        await self._set(user_id, auth_header)

    async def resume(self, user_id: str, auth_header: Optional[str] = None) -> None:
        logger.debug(f"Identity session resumed: {user_id}")
        await self._set(user_id, auth_header)

    async def sign_out(self) -> None:
        logger.info(f"Identity signed out: {self._user_id}")
        await self._set(None, None)

    async def _set(self, user_id: Optional[str], auth_header: Optional[str]) -> None:
        self._user_id = user_id
        self._auth_header = auth_header
        # Snapshot so listeners may unsubscribe while being notified
        listeners = list(self._listeners)
        if listeners:
            await asyncio.gather(*(listener(user_id, auth_header) for listener in listeners))
