"""Literal pattern intent matcher for the FAQ knowledge base.

Intent classification logic:
- Lower-cases and strips the message.
- Evaluates `MatchRule`s in declared order; the first rule whose pattern matches
  decides the category.
- No match at all yields `IntentCategory.UNMATCHED`, which the router treats as
  "escalate to the remote model".

Pattern policy:
- Rules only match explicit FAQ phrasings ("track my order", "gift ideas").
  Open-ended questions ("what's a good gift for a coffee lover") must fall
  through, so every pattern is anchored at the start and nearly all at the end.
- Recipient-specific gift rules are listed before the generic gift catch-all.

Determinism:
- Pure function of the input and the immutable rule table.

Failure handling:
- Never raises. `None` or blank input is `UNMATCHED`.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Pattern, Sequence, Tuple


logger = logging.getLogger(__name__)


class IntentCategory(str, Enum):
    ORDER_TRACKING = "order_tracking"
    RETURNS = "returns"
    PAYMENT = "payment"
    SHIPPING = "shipping"
    PRODUCTS = "products"
    GIFT_IDEAS = "gift_ideas"
    ACCOUNT = "account"
    HELP = "help"
    GREETING = "greeting"
    THANKS = "thanks"
    BYE = "bye"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class MatchRule:
    """One compiled pattern owned by a category."""

    category: IntentCategory
    pattern: Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rules(category: IntentCategory, *patterns: str) -> Tuple[MatchRule, ...]:
    return tuple(MatchRule(category, re.compile(p, re.IGNORECASE)) for p in patterns)


# =========================================================
# RULE TABLE (ORDER IS PRIORITY)
# =========================================================

DEFAULT_RULES: Tuple[MatchRule, ...] = (
    *_rules(
        IntentCategory.ORDER_TRACKING,
        r"^track\s*(my\s*)?(order|package)$",
        r"^order\s*(status|tracking)$",
        r"^where('?s|\s+is)\s+my\s+(order|package)\??$",
        r"^check\s*(my\s*)?(order|delivery|shipment)$",
    ),
    *_rules(
        IntentCategory.RETURNS,
        r"^return\s*(policy|an?\s*item)?$",
        r"^returns?\s*(&|and)?\s*refunds?$",
        r"^how\s*(do|can)\s*i\s*return",
        r"^refund\s*(policy)?$",
        r"^exchange\s*(policy)?$",
    ),
    *_rules(
        IntentCategory.PAYMENT,
        r"^payment\s*(method|option|question)s?$",
        r"^(what|which)\s*(payment|card)s?\s*(do\s*you\s*)?(accept|take)",
        r"^(how\s*)?(can|do)\s*i\s*pay",
        r"^credit\s*card",
        r"^paypal",
    ),
    *_rules(
        IntentCategory.SHIPPING,
        r"^shipping\s*(info|option|cost|rate|time)s?$",
        r"^(how\s*)?long\s*(does|will)\s*(shipping|delivery)",
        r"^delivery\s*(time|option|cost)s?$",
        r"^free\s*shipping",
    ),
    *_rules(
        IntentCategory.PRODUCTS,
        r"^product\s*(categor|recommend)",
        r"^(your|the)\s*products?$",
        r"^what\s*(do\s*you|products?\s*do\s*you)\s*(sell|have|offer)",
        r"^show\s*(me\s*)?(your\s*)?products?$",
    ),
    *_rules(
        IntentCategory.GIFT_IDEAS,
        # Recipient-specific phrasings first, generic catch-all last.
        r"^gifts?\s*(ideas?\s*)?for\s*(him|her|kids|men|women|mom|dad)$",
        r"^(birthday|holiday|christmas)\s*gifts?(\s*ideas?)?$",
        r"^(show\s*me\s*)?gift\s*(ideas?|suggestions?|recommendations?)$",
    ),
    *_rules(
        IntentCategory.ACCOUNT,
        r"^(my\s*)?account$",
        r"^(reset|forgot)\s*(my\s*)?password$",
        r"^login\s*(help|issue|problem)?$",
        r"^sign\s*(up|in)$",
    ),
    *_rules(
        IntentCategory.HELP,
        r"^help$",
        r"^what\s*can\s*you\s*(do|help)",
        r"^(your\s*)?capabilities$",
        r"^menu$",
    ),
    *_rules(
        IntentCategory.GREETING,
        r"^(hi|hello|hey|yo)!?$",
        r"^good\s*(morning|afternoon|evening)!?$",
        r"^greetings?!?$",
    ),
    *_rules(
        IntentCategory.THANKS,
        r"^thanks?!?$",
        r"^thank\s*you!?$",
        r"^appreciate\s*(it|that)?!?$",
    ),
    *_rules(
        IntentCategory.BYE,
        r"^bye!?$",
        r"^goodbye!?$",
        r"^(that'?s\s*)?all!?$",
        r"^(ok|okay|done|exit)!?$",
    ),
)


class IntentMatcher:
    """Ordered, read-only rule table with first-match-wins classification."""

    def __init__(self, rules: Sequence[MatchRule] = DEFAULT_RULES):
        self._rules = tuple(rules)

    @property
    def rules(self) -> Tuple[MatchRule, ...]:
        return self._rules

    def categories(self) -> Tuple[IntentCategory, ...]:
        """Categories owning at least one rule, in evaluation order."""
        seen = []
        for rule in self._rules:
            if rule.category not in seen:
                seen.append(rule.category)
        return tuple(seen)

    def classify(self, message) -> IntentCategory:
        """Return the category of the first matching rule, else `UNMATCHED`."""
        if not message:
            return IntentCategory.UNMATCHED

        text = str(message).lower().strip()
        if not text:
            return IntentCategory.UNMATCHED

        for rule in self._rules:
            if rule.matches(text):
                logger.debug("KB matched intent: %s", rule.category.value)
                return rule.category

        logger.debug("No KB match")
        return IntentCategory.UNMATCHED
