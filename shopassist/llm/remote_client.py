"""Stateful remote conversation client with sequential model failover.

Architectural role:
    Owns the rolling conversation window and the session credential, and wraps one
    conversational turn to the remote model into a typed `RemoteResult`. This is the
    only component that mutates the window.

Model call flow:
    user message -> append once -> attempt model[0] -> on model incompatibility
    attempt model[1] ... -> append reply -> trim window. Trimming never leaves a
    model turn at the head of the window.

Retry behavior:
    Retries happen only for `ModelIncompatibleError`, sequentially, over the fixed
    failover list. Credential, transport and empty-reply failures are terminal.

Concurrency:
    The window is guarded by a lock; the network call runs outside it. Callers are
    expected to serialize `converse` per client (see `core.session`).

Cancellation:
    A `CancellationToken` lets a caller abandon a pending call. A late reply for a
    cancelled call is discarded and the call's user turn is withdrawn, so the window
    only ever reflects completed exchanges.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from shopassist.llm.client import (
    InvalidCredentialError,
    ModelIncompatibleError,
    NoResponseGeneratedError,
    RemoteModelError,
    build_transport,
)
from shopassist.llm.provider_config import HISTORY_LIMIT, PROVIDER, models_for


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTurn:
    """One window entry. `role` is "user" or "model"."""

    role: str
    text: str


class RemoteStatus(str, Enum):
    SUCCESS = "success"
    UNCONFIGURED = "unconfigured"
    FAILURE = "failure"
    CANCELLED = "cancelled"


class ErrorKind(str, Enum):
    MODEL_INCOMPATIBLE = "model_incompatible"
    INVALID_CREDENTIAL = "invalid_credential"
    NO_RESPONSE_GENERATED = "no_response_generated"
    TRANSPORT_OR_OTHER = "transport_or_other"


def _error_kind(err: RemoteModelError) -> ErrorKind:
    if isinstance(err, InvalidCredentialError):
        return ErrorKind.INVALID_CREDENTIAL
    if isinstance(err, ModelIncompatibleError):
        return ErrorKind.MODEL_INCOMPATIBLE
    if isinstance(err, NoResponseGeneratedError):
        return ErrorKind.NO_RESPONSE_GENERATED
    return ErrorKind.TRANSPORT_OR_OTHER


@dataclass
class RemoteResult:
    """Outcome of one `converse` call.

    Attributes:
        status: Which variant this result is.
        text: Reply text on success.
        error_detail: Verbatim failure description on failure.
        error_kind: Failure classification on failure.
        model: Model id that produced the reply (success) or failed last.
    """

    status: RemoteStatus
    text: Optional[str] = None
    error_detail: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    model: Optional[str] = None

    @classmethod
    def success(cls, text, model=None):
        return cls(RemoteStatus.SUCCESS, text=text, model=model)

    @classmethod
    def unconfigured(cls):
        return cls(RemoteStatus.UNCONFIGURED)

    @classmethod
    def failure(cls, error_detail, error_kind=ErrorKind.TRANSPORT_OR_OTHER, model=None):
        return cls(RemoteStatus.FAILURE, error_detail=error_detail, error_kind=error_kind, model=model)

    @classmethod
    def cancelled(cls, model=None):
        return cls(RemoteStatus.CANCELLED, model=model)

    @property
    def ok(self) -> bool:
        return self.status is RemoteStatus.SUCCESS


class CancellationToken:
    """Thread-safe flag a caller sets to abandon an outstanding call."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class RemoteModelClient:
    """Conversation client bound to one credential and one rolling window."""

    def __init__(
        self,
        credential: Optional[str] = None,
        models=None,
        transport=None,
        history_limit: int = HISTORY_LIMIT,
    ):
        if history_limit < 1:
            raise ValueError("history_limit must be positive")

        self._credential = None
        self.set_credential(credential)

        if transport is None:
            transport = build_transport(PROVIDER)
        self._transport = transport

        if models is None:
            models = models_for(getattr(transport, "name", PROVIDER))
        self._models = tuple(models)
        if not self._models:
            raise ValueError("at least one model id is required")

        self._history_limit = history_limit
        self._history: List[ConversationTurn] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def models(self) -> tuple:
        return self._models

    def set_credential(self, credential: Optional[str]) -> None:
        """Hold `credential` in memory; blank values leave the client unconfigured."""
        if credential is not None:
            credential = str(credential).strip() or None
        self._credential = credential

    def clear_credential(self) -> None:
        self._credential = None

    def is_configured(self) -> bool:
        return bool(self._credential)

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    def history(self) -> List[ConversationTurn]:
        with self._lock:
            return list(self._history)

    def clear_history(self) -> None:
        """Empty the window. The credential is left untouched."""
        with self._lock:
            self._history.clear()

    def _append(self, turn: ConversationTurn) -> None:
        # Caller holds the lock.
        self._history.append(turn)
        overflow = len(self._history) - self._history_limit
        if overflow > 0:
            del self._history[:overflow]
            # The window must open on a user turn.
            while self._history and self._history[0].role != "user":
                del self._history[0]

    def _withdraw(self, turn: ConversationTurn) -> None:
        with self._lock:
            for idx in range(len(self._history) - 1, -1, -1):
                if self._history[idx] is turn:
                    del self._history[idx]
                    break

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def converse(self, user_message: str, cancel_token: Optional[CancellationToken] = None) -> RemoteResult:
        """Run one conversational turn with model failover.

        Args:
            user_message: Raw user text, appended to the window exactly once.
            cancel_token: Optional token; when set before the reply lands the reply
                is discarded.

        Returns:
            `RemoteResult` in one of the four statuses. Never raises for remote
            failures.
        """
        if not self.is_configured():
            return RemoteResult.unconfigured()

        credential = self._credential
        user_turn = ConversationTurn("user", str(user_message))

        with self._lock:
            self._append(user_turn)
            window = list(self._history)

        model_index = 0
        while True:
            model = self._models[model_index]

            if cancel_token is not None and cancel_token.cancelled:
                self._withdraw(user_turn)
                return RemoteResult.cancelled(model)

            logger.info("Trying remote model %s (%d/%d)", model, model_index + 1, len(self._models))
            try:
                reply = self._transport.generate(model, window, credential)
            except InvalidCredentialError as err:
                logger.error("Remote model rejected credential (%s)", model)
                return RemoteResult.failure(err.message, ErrorKind.INVALID_CREDENTIAL, model)
            except ModelIncompatibleError as err:
                if model_index + 1 < len(self._models):
                    logger.warning(
                        "Model %s failed (%s). Retrying with %s",
                        model, err.message, self._models[model_index + 1],
                    )
                    model_index += 1
                    continue
                logger.error("No fallback model left after %s: %s", model, err.message)
                return RemoteResult.failure(err.message, ErrorKind.MODEL_INCOMPATIBLE, model)
            except RemoteModelError as err:
                logger.error("Remote model call failed (%s): %s", model, err.message)
                return RemoteResult.failure(err.message, _error_kind(err), model)
            break

        if cancel_token is not None and cancel_token.cancelled:
            logger.info("Discarding reply from %s for a cancelled call", model)
            self._withdraw(user_turn)
            return RemoteResult.cancelled(model)

        with self._lock:
            self._append(ConversationTurn("model", reply))

        return RemoteResult.success(reply, model)


__all__ = [
    "CancellationToken",
    "ConversationTurn",
    "ErrorKind",
    "RemoteModelClient",
    "RemoteResult",
    "RemoteStatus",
]
