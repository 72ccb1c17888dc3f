"""Per-message routing between knowledge base, remote model and fallback.

Control-flow model:
    1. Classify the message and look up a template.
    2. A real template answers immediately (`knowledge_base`); the remote model is
       not consulted. Only exact pattern matches count as confident.
    3. Otherwise, with a configured remote client, escalate:
       - success -> `remote_model` with keyword follow-ups,
       - failure -> `error` with the failure detail embedded verbatim,
       - cancelled -> `cancelled`,
       - unconfigured -> step 4.
    4. Generic `fallback` prompt with the default topic list.

Error handling strategy:
    Remote failures are rendered as visible diagnostics rather than silently
    replaced by a knowledge-base answer, so misconfigured keys surface to the user.

Determinism:
    Steps 1, 2 and 4 are deterministic for a fixed template random source. The remote
    path depends on remote inference.
"""

import logging
from typing import List, Optional

from shopassist.core.routing_types import ResponseSource, RoutingResult
from shopassist.knowledge.intent_matcher import IntentMatcher
from shopassist.knowledge.response_catalog import ResponseCatalog
from shopassist.llm.remote_client import RemoteModelClient, RemoteStatus


logger = logging.getLogger(__name__)


FALLBACK_TEXT = (
    "🤔 I'd love to help with that! For personalized recommendations, please set up "
    "your AI API key in settings (⚙️).\n\nOr try one of these:"
)
FALLBACK_FOLLOW_UP = ["Track order", "Returns", "Shipping info", "Payment help"]

ERROR_FOLLOW_UP = ["Check settings", "Try again"]

DEFAULT_FOLLOW_UP = ["Tell me more", "Different question", "Help"]

# Reply for failures outside the routing decision itself (adapter catch-alls).
APOLOGY_TEXT = (
    "I apologize, but I encountered an issue. Please try again or contact our support team.\n\n"
    "📞 Support: 1-800-SHOP-HELP\n📧 Email: support@shopassist.com"
)
APOLOGY_FOLLOW_UP = ["Try again", "Contact support"]

# Keyword -> suggestions, checked in order; first hit wins.
FOLLOW_UP_RULES = (
    (("gift", "present", "recommend"), ["More gift ideas", "Different price range", "Another category"]),
    (("order", "track"), ["Track another order", "Return this item", "Contact support"]),
    (("return", "refund", "broken"), ["Start a return", "Check refund status", "Talk to human"]),
    (("price", "cost", "buy"), ["See current deals", "Payment options", "Shipping costs"]),
    (("compare", "versus"), ["Compare other models", "Show best sellers", "Read reviews"]),
)


def error_message(detail: str) -> str:
    """User-facing diagnostic for a failed remote call, detail kept verbatim."""
    return (
        "⚠️ I'm having trouble connecting to my AI brain right now.\n\n"
        f"Error: *{detail}*\n\n"
        "Please check your API key in settings (⚙️) or try again later."
    )


def apology_result() -> RoutingResult:
    return RoutingResult(
        text=APOLOGY_TEXT,
        source=ResponseSource.ERROR,
        follow_up=list(APOLOGY_FOLLOW_UP),
    )


def derive_follow_up(message: str) -> List[str]:
    """Pick follow-up suggestions for a remote answer from message keywords."""
    lower = str(message or "").lower()
    for keywords, suggestions in FOLLOW_UP_RULES:
        if any(keyword in lower for keyword in keywords):
            return list(suggestions)
    return list(DEFAULT_FOLLOW_UP)


class ResponseRouter:
    """Decision core: knowledge base first, remote model second, fallback last."""

    def __init__(
        self,
        matcher: IntentMatcher,
        catalog: ResponseCatalog,
        remote: Optional[RemoteModelClient] = None,
    ):
        self.matcher = matcher
        self.catalog = catalog
        self.remote = remote

    def route(self, message: str, cancel_token=None) -> RoutingResult:
        category = self.matcher.classify(message)
        template = self.catalog.lookup(category)

        if not template.is_no_answer:
            logger.info("Using KB response for: %s", category.value)
            return RoutingResult(
                text=template.text,
                source=ResponseSource.KNOWLEDGE_BASE,
                follow_up=list(template.follow_up),
                intent=category,
            )

        if self.remote is not None and self.remote.is_configured():
            logger.info("Routing to remote model")
            result = self.remote.converse(message, cancel_token=cancel_token)

            if result.status is RemoteStatus.SUCCESS:
                return RoutingResult(
                    text=result.text,
                    source=ResponseSource.REMOTE_MODEL,
                    follow_up=derive_follow_up(message),
                    intent=category,
                    model=result.model,
                )

            if result.status is RemoteStatus.FAILURE:
                logger.error("Remote model failed: %s", result.error_detail)
                return RoutingResult(
                    text=error_message(result.error_detail),
                    source=ResponseSource.ERROR,
                    follow_up=list(ERROR_FOLLOW_UP),
                    intent=category,
                    model=result.model,
                )

            if result.status is RemoteStatus.CANCELLED:
                return RoutingResult(
                    text="",
                    source=ResponseSource.CANCELLED,
                    intent=category,
                    model=result.model,
                )

        return RoutingResult(
            text=FALLBACK_TEXT,
            source=ResponseSource.FALLBACK,
            follow_up=list(FALLBACK_FOLLOW_UP),
            intent=category,
        )
