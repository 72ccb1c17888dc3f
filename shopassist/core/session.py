"""Per-user routing sessions.

Purpose of this abstraction:
    Replace process-wide credential and history globals with an explicit object per
    chat user. Each `RouterSession` owns its matcher, catalog, remote client (and so
    its rolling window and credential) and router. Nothing is shared between
    sessions except the immutable rule and template tables.

Concurrency:
    `route` is not re-entrant. A non-blocking lock rejects a second message for the
    same session while one is in flight (`SessionBusyError`), mirroring a chat UI
    that disables input during a pending reply. `SessionRegistry` is safe to use from
    concurrent request handlers.
"""

import logging
import threading
import uuid
from typing import Dict, List, Optional

from shopassist.core.router import ResponseRouter
from shopassist.core.routing_types import RoutingResult
from shopassist.knowledge.intent_matcher import IntentCategory, IntentMatcher
from shopassist.knowledge.response_catalog import ResponseCatalog, ResponseTemplate
from shopassist.llm.remote_client import (
    CancellationToken,
    ConversationTurn,
    RemoteModelClient,
    RemoteResult,
)


logger = logging.getLogger(__name__)


class SessionBusyError(RuntimeError):
    """Raised when a session is asked to route while another message is pending."""


class RouterSession:
    """Everything one chat user needs: knowledge base, remote client, router."""

    def __init__(
        self,
        credential: Optional[str] = None,
        rng=None,
        transport=None,
        models=None,
        history_limit: Optional[int] = None,
    ):
        self.matcher = IntentMatcher()
        self.catalog = ResponseCatalog(rng=rng)

        remote_kwargs = {"credential": credential, "models": models, "transport": transport}
        if history_limit is not None:
            remote_kwargs["history_limit"] = history_limit
        self.remote = RemoteModelClient(**remote_kwargs)

        self.router = ResponseRouter(self.matcher, self.catalog, self.remote)
        self._busy = threading.Lock()

    # ------------------------------------------------------------------
    def route(self, message: str, cancel_token: Optional[CancellationToken] = None) -> RoutingResult:
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("a message is already being processed")
        try:
            return self.router.route(message, cancel_token=cancel_token)
        finally:
            self._busy.release()

    def classify(self, message: str) -> IntentCategory:
        return self.matcher.classify(message)

    def lookup(self, category: IntentCategory) -> ResponseTemplate:
        return self.catalog.lookup(category)

    def converse(self, message: str, cancel_token: Optional[CancellationToken] = None) -> RemoteResult:
        return self.remote.converse(message, cancel_token=cancel_token)

    # ------------------------------------------------------------------
    def set_credential(self, credential: str) -> None:
        self.remote.set_credential(credential)

    def clear_credential(self) -> None:
        self.remote.clear_credential()

    def is_configured(self) -> bool:
        return self.remote.is_configured()

    def clear_history(self) -> None:
        self.remote.clear_history()

    def history(self) -> List[ConversationTurn]:
        return self.remote.history()


class SessionRegistry:
    """Thread-safe in-memory map of session id -> `RouterSession`."""

    def __init__(self, factory=RouterSession):
        self._factory = factory
        self._sessions: Dict[str, RouterSession] = {}
        self._lock = threading.Lock()

    def create(self, **kwargs):
        session_id = uuid.uuid4().hex
        session = self._factory(**kwargs)
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> Optional[RouterSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def drop(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
