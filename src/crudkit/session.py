"""
Client session: one opaque JSON blob kept in storage under a configured key.

Only the `token` field is interpreted; it becomes the authorization header.
"""

import json
import logging
from typing import Any, Optional

from crudkit.config import ClientConfig
from crudkit.errors import ConfigurationError
from crudkit.storage import Storage

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, config: ClientConfig, storage: Optional[Storage]):
        self._config = config
        self._storage = storage

    def set_session(self, session: Optional[dict[str, Any]]) -> None:
        """Store `session`, replacing any previous one. None clears it."""
        if self._storage is None:
            return
        key = self._config.session_key_name
        if session is None:
            if key:
                self._storage.remove(key)
            return
        if not key:
            raise ConfigurationError("No session_key_name defined in client config")
        self._storage.set(key, json.dumps(session))

    def get_session(self) -> Optional[dict[str, Any]]:
        """Return the stored session, or None. Never raises."""
        key = self._config.session_key_name
        if self._storage is None or not key:
            return None
        try:
            raw = self._storage.get(key)
        except Exception:
            logger.warning("Session storage unavailable", exc_info=True)
            return None
        if not raw:
            return None
        try:
            session = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable session stored under %r", key)
            return None
        if not isinstance(session, dict):
            logger.warning("Discarding non-object session stored under %r", key)
            return None
        return session

    def set_session_token(self, token: Optional[str]) -> None:
        # Not atomic: concurrent writers may overwrite each other.
        session = self.get_session() or {}
        session["token"] = token
        self.set_session(session)

    def get_session_token(self) -> Optional[str]:
        session = self.get_session()
        if session is None:
            return None
        return session.get("token") or None

    def clear(self) -> None:
        self.set_session(None)
