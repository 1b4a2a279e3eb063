"""Current-identity signal for a task session.

Holds the signed-in user id (or None) and notifies subscribers whenever it
changes, including sign-in and sign-out.
"""

import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class IdentityProvider:
    """Process-local identity holder with change notification."""

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity
        self._listeners: List[IdentityListener] = []

    @property
    def current(self) -> Optional[str]:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id is required to sign in")
        self._set(user_id)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, identity: Optional[str]) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        logger.debug(f"Identity changed: {'signed in' if identity else 'signed out'}")
        for listener in list(self._listeners):
            listener(identity)
