"""
Admin gating: the remote API decides who is admin (GET /entities/User/me -> role).
Authentication itself is not handled here; the configured bearer token is used as-is.
"""
import logging
import threading

from app.core.errors import RemoteRequestError
from app.services import remote
from app.services.remote.client import RemoteClient

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class AdminGate:
    """Caches a positive or negative answer; failures answer False without caching so a later call retries."""

    def __init__(self, client: RemoteClient | None = None) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._is_admin: bool | None = None

    def is_admin(self) -> bool:
        with self._lock:
            if self._is_admin is not None:
                return self._is_admin
            try:
                me = remote.get_current_user(client=self._client)
            except RemoteRequestError as e:
                logger.warning("Admin check failed: %s", e)
                return False
            self._is_admin = bool(me) and me.get("role") == ADMIN_ROLE
            logger.info("Admin check: role=%s admin=%s", (me or {}).get("role"), self._is_admin)
            return self._is_admin

    def reset(self) -> None:
        with self._lock:
            self._is_admin = None
