"""Password gate for the local session.

A single string comparison; the accepted password is persisted so the
session survives restarts. Logout fires registered hooks, which is where
per-session state such as the thread cache gets cleared.
"""

import logging
from collections.abc import Callable

from searchclient.session.storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "flf_auth_token"


class SessionGate:
    """Local authentication state."""

    def __init__(self, password: str | None, storage: KeyValueStorage) -> None:
        self._password = password
        self._storage = storage
        self._logout_hooks: list[Callable[[], None]] = []
        self.is_authenticated = False
        self.is_checking = True

    def init(self) -> None:
        """Restore authentication from storage."""
        stored = self._storage.get_item(STORAGE_KEY)
        self.is_authenticated = self._password is not None and stored == self._password
        self.is_checking = False

    def authenticate(self, password: str) -> bool:
        """Check a password, persisting it on success."""
        if self._password is None or password != self._password:
            logger.info("[session] authentication rejected")
            return False
        self._storage.set_item(STORAGE_KEY, password)
        self.is_authenticated = True
        return True

    def on_logout(self, hook: Callable[[], None]) -> None:
        """Register a callback run on logout."""
        self._logout_hooks.append(hook)

    def logout(self) -> None:
        """Forget the stored token and end the session."""
        self._storage.remove_item(STORAGE_KEY)
        self.is_authenticated = False
        for hook in self._logout_hooks:
            hook()

    @property
    def needs_auth(self) -> bool:
        return not self.is_authenticated and not self.is_checking
