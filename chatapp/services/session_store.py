"""In-memory, session-partitioned data store.

Every session identifier maps to its own :class:`SessionBundle`; nothing is
shared between bundles. Bundles are provisioned lazily on first access and,
unless ``max_sessions`` is set, live for the lifetime of the process.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Dict, List, Optional

from ..models.domain import Conversation, Message, UsageStat, UserSettings

logger = logging.getLogger(__name__)


class SessionBundle:
    """Conversations, messages, settings and usage rows of one session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.conversations: Dict[str, Conversation] = {}
        self.messages: Dict[str, Message] = {}
        self.settings = UserSettings()
        self.usage: List[UsageStat] = []
        # Re-entrant so repository helpers can nest while holding it.
        self.lock = threading.RLock()


class SessionStore:
    """Maps session identifiers to isolated bundles, optionally LRU-bounded."""

    def __init__(self, max_sessions: Optional[int] = None) -> None:
        if max_sessions is not None and max_sessions < 1:
            raise ValueError("max_sessions must be a positive integer")
        self.max_sessions = max_sessions
        self._bundles: "OrderedDict[str, SessionBundle]" = OrderedDict()
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> SessionBundle:
        with self._lock:
            bundle = self._bundles.get(session_id)
            if bundle is not None:
                self._bundles.move_to_end(session_id)
                return bundle

            bundle = SessionBundle(session_id)
            self._bundles[session_id] = bundle
            logger.debug("Provisioned session bundle %s", session_id)

            if self.max_sessions is not None:
                while len(self._bundles) > self.max_sessions:
                    evicted, _ = self._bundles.popitem(last=False)
                    logger.info("Evicted least recently used session %s", evicted)
            return bundle

    def get(self, session_id: str) -> Optional[SessionBundle]:
        """Return the bundle without provisioning one."""
        with self._lock:
            return self._bundles.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._bundles

    def __len__(self) -> int:
        with self._lock:
            return len(self._bundles)
