"""Routing result contracts for `shopassist.core.router`.

Architectural role:
    Defines the schema returned by the router and serialized by the HTTP and CLI
    adapters.

Determinism:
    The data class is purely structural and state-free.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from shopassist.knowledge.intent_matcher import IntentCategory


class ResponseSource(str, Enum):
    """Which responder produced a `RoutingResult`."""

    KNOWLEDGE_BASE = "knowledge_base"
    REMOTE_MODEL = "remote_model"
    FALLBACK = "fallback"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class RoutingResult:
    """One routed reply.

    Attributes:
        text: Reply body shown to the user.
        source: Responder that produced the reply.
        follow_up: Suggested next prompts, in display order.
        intent: Category the knowledge base assigned to the message.
        model: Remote model id when the remote path was taken.
    """

    text: str
    source: ResponseSource
    follow_up: List[str] = field(default_factory=list)
    intent: IntentCategory = IntentCategory.UNMATCHED
    model: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "source": self.source.value,
            "follow_up": list(self.follow_up),
            "intent": self.intent.value,
            "model": self.model,
        }
