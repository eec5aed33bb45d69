"""Session-scoped identity token."""

import secrets
import string
import time

from pagetelemetry.core.logs import get_logger
from pagetelemetry.core.ports import SessionStoragePort

logger = get_logger(__name__)

DEFAULT_SESSION_KEY = "error-session-id"
SERVER_SESSION_ID = "server"

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_session_id() -> str:
    """Return a new token of the form ``session-<epoch ms>-<base36 suffix>``."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"session-{int(time.time() * 1000)}-{suffix}"


class SessionIdentity:
    """Lazily created token persisted in session storage.

    Outside a browsing session (no storage) the token is always "server".

    Args:
        storage: Session-scoped storage, or None in a non-browser context.
        key: Storage key the token lives under.
    """

    def __init__(
        self,
        storage: SessionStoragePort | None,
        key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        self._storage = storage
        self._key = key

    def get_session_id(self) -> str:
        """Return the session token, creating and persisting it on first use."""
        if self._storage is None:
            return SERVER_SESSION_ID

        try:
            session_id = self._storage.get_item(self._key)
        except Exception:
            logger.warning("Session storage read failed", exc_info=True)
            return generate_session_id()

        if session_id:
            return session_id

        session_id = generate_session_id()
        try:
            self._storage.set_item(self._key, session_id)
        except Exception:
            logger.warning("Session storage write failed", exc_info=True)
        return session_id
