"""
Purpose: Session-expiry signalling.
What it does:
- SessionObserver: a synchronous publish/subscribe channel. Every
  authenticated client is handed the same observer and calls `emit(reason)`
  once it has cleared a rejected credential.
- SessionExpiryHandler: the reference subscriber (what the root navigation
  controller does): log out once, ignore repeats until the next sign-in.

This is in-process only. It does not coordinate across devices.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from .credentials import CredentialStore, Role

logger = logging.getLogger(__name__)

SessionListener = Callable[[str], None]


class SessionObserver:
    def __init__(self):
        self._listeners: List[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register `listener`; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, reason: str = "Session expired") -> None:
        # Iterate over a snapshot so listeners may unsubscribe while handling.
        for listener in list(self._listeners):
            try:
                listener(reason)
            except Exception:
                logger.exception("Session listener %r failed while handling %r", listener, reason)

    def __len__(self) -> int:
        return len(self._listeners)


class SessionExpiryHandler:
    """
    Clears the given roles' credentials, drops the user context and fires
    `on_logged_out` exactly once per signed-in period, however many signals
    arrive in a row.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        resolver=None,
        on_logged_out: Optional[Callable[[str], None]] = None,
        roles: Iterable[Role] = (Role.OWNER, Role.DRIVER),
    ):
        self.credential_store = credential_store
        self.resolver = resolver
        self.on_logged_out = on_logged_out
        self.roles = tuple(roles)
        self._armed = True

    @property
    def logged_out(self) -> bool:
        return not self._armed

    def arm(self) -> None:
        """Called after a successful sign-in so the next expiry is handled again."""
        self._armed = True

    def __call__(self, reason: str) -> None:
        if not self._armed:
            logger.debug("Ignoring repeated session expiry: %s", reason)
            return
        self._armed = False

        for role in self.roles:
            self.credential_store.clear(role)
        if self.resolver is not None:
            self.resolver.forget()

        logger.warning("Session expired: %s", reason)
        if self.on_logged_out is not None:
            self.on_logged_out(reason)
