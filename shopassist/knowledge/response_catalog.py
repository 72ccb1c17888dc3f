"""Canned FAQ responses keyed by intent category.

Each category owns one or more `ResponseTemplate`s. When several exist, one is
picked with the catalog's random source, which callers can inject for
deterministic tests.

The `UNMATCHED` category owns only `NO_ANSWER`, a template without text that tells
the router to escalate instead of answering from the knowledge base. Categories
without templates fall back to the `UNMATCHED` set.

Template text uses light markup understood by the chat widget: `**bold**`,
`•` bullets, numbered lists, pipe tables and `\\n` line breaks.
"""

import random
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from shopassist.knowledge.intent_matcher import IntentCategory


@dataclass(frozen=True)
class ResponseTemplate:
    """Answer body plus suggested follow-up prompts. `text=None` means "no answer"."""

    text: Optional[str]
    follow_up: Tuple[str, ...] = ()

    @property
    def is_no_answer(self) -> bool:
        return self.text is None


NO_ANSWER = ResponseTemplate(text=None)


DEFAULT_TEMPLATES: Mapping[IntentCategory, Tuple[ResponseTemplate, ...]] = {
    IntentCategory.ORDER_TRACKING: (
        ResponseTemplate(
            "📦 **Track Your Order**\n\n"
            "To track your order, please provide your order number (found in your confirmation email).\n\n"
            "Alternatively, you can:\n"
            "• Check your email for tracking updates\n"
            "• Log into your account → Order History\n"
            "• Use our tracking page with your order ID\n\n"
            "🔍 Would you like me to help you find your order number?",
            ("I have my order number", "Check order history", "Talk to support"),
        ),
    ),
    IntentCategory.RETURNS: (
        ResponseTemplate(
            "🔄 **Returns & Refunds**\n\n"
            "Our return policy:\n"
            "• **30-day** return window from delivery\n"
            "• Items must be unused with original packaging\n"
            "• Free returns on most items\n\n"
            "**How to return:**\n"
            "1. Log into your account\n"
            "2. Go to Order History\n"
            "3. Select \"Return Item\"\n"
            "4. Print the prepaid shipping label\n\n"
            "Refunds are processed within 5-7 business days.\n\n"
            "💡 Need help with a specific return?",
            ("Start a return", "Check return status", "Talk to support"),
        ),
    ),
    IntentCategory.PAYMENT: (
        ResponseTemplate(
            "💳 **Payment Methods**\n\n"
            "We accept:\n"
            "• **Credit/Debit Cards**: Visa, Mastercard, Amex, Discover\n"
            "• **Digital Wallets**: Apple Pay, Google Pay, PayPal\n"
            "• **Buy Now, Pay Later**: Affirm, Klarna, Afterpay\n"
            "• **Gift Cards**: Shop gift cards accepted\n\n"
            "🔒 All transactions are secured with 256-bit encryption.\n\n"
            "Having payment issues? I can help troubleshoot!",
            ("Payment failed", "Add payment method", "Gift card balance"),
        ),
    ),
    IntentCategory.SHIPPING: (
        ResponseTemplate(
            "🚚 **Shipping Options**\n\n"
            "| Option | Time | Cost |\n"
            "|--------|------|------|\n"
            "| Standard | 5-7 days | $4.99 |\n"
            "| Express | 2-3 days | $9.99 |\n"
            "| Next Day | 1 day | $14.99 |\n\n"
            "✨ **FREE shipping** on orders over $50!\n\n"
            "🌍 We ship to 50+ countries internationally.",
            ("International shipping", "Track package", "Expedite my order"),
        ),
    ),
    IntentCategory.PRODUCTS: (
        ResponseTemplate(
            "🛍️ **Product Categories**\n\n"
            "We offer a wide range of products:\n\n"
            "• 📱 Electronics & Gadgets\n"
            "• 👕 Fashion & Apparel\n"
            "• 🏠 Home & Living\n"
            "• 💄 Beauty & Personal Care\n"
            "• 🏃 Sports & Fitness\n\n"
            "Tell me what you're looking for and I can give you personalized recommendations!",
            ("Electronics", "Fashion", "Home goods", "Best sellers"),
        ),
    ),
    IntentCategory.GIFT_IDEAS: (
        ResponseTemplate(
            "🎁 **Gift Ideas**\n\n"
            "Popular picks right now:\n"
            "• ☕ **Coffee lovers**: Premium coffee maker ($79), insulated travel mug ($28)\n"
            "• 🎧 **Tech fans**: Wireless earbuds ($129), portable power bank ($35)\n"
            "• 🧘 **Fitness fans**: Yoga mat set ($55), smart water bottle ($45)\n"
            "• 🍳 **Home cooks**: Air fryer ($89), smart kitchen scale ($35)\n\n"
            "Tell me who it's for and your budget, and I'll narrow it down!",
            ("Gifts under $50", "Tech gifts", "Gift cards"),
        ),
    ),
    IntentCategory.ACCOUNT: (
        ResponseTemplate(
            "👤 **Account Help**\n\n"
            "I can help you with:\n"
            "• **Password Reset**: Use \"Forgot Password\" on login page\n"
            "• **Update Info**: Go to Account Settings\n"
            "• **Order History**: View all past orders\n"
            "• **Saved Addresses**: Manage shipping addresses\n\n"
            "🔐 For security changes, you may need to verify your email.",
            ("Reset password", "Update email", "View orders"),
        ),
    ),
    IntentCategory.HELP: (
        ResponseTemplate(
            "🛠️ **What I Can Do**\n\n"
            "I'm ShopAssist AI! I can help with:\n\n"
            "• 📦 **Orders**: Track shipments, view history\n"
            "• 🔄 **Returns**: Guide you through returns\n"
            "• 💳 **Payments**: Answer payment questions\n"
            "• 🛍️ **Shopping**: Personalized recommendations\n\n"
            "Just ask me anything! For complex questions, I use an AI model.",
            ("Track my order", "Return policy", "Product help"),
        ),
    ),
    IntentCategory.GREETING: (
        ResponseTemplate(
            "👋 Hello! I'm ShopAssist AI, your personal shopping assistant!\n\n"
            "I can help you with:\n"
            "• 📦 Order tracking\n"
            "• 🔄 Returns & refunds\n"
            "• 💳 Payment questions\n"
            "• 🛍️ Product recommendations\n\n"
            "How can I help you today?",
            ("Track my order", "Product recommendations", "Help"),
        ),
        ResponseTemplate(
            "👋 Hi there! Welcome to ShopAssist.\n\n"
            "Ask me about orders, returns, shipping or gift ideas. What can I do for you?",
            ("Track my order", "Gift ideas", "Shipping info"),
        ),
    ),
    IntentCategory.THANKS: (
        ResponseTemplate(
            "😊 You're welcome! Happy I could help!\n\nIs there anything else you need?",
            ("Yes, another question", "No, that's all"),
        ),
        ResponseTemplate(
            "🙌 Anytime! Let me know if something else comes up.",
            ("Yes, another question", "No, that's all"),
        ),
    ),
    IntentCategory.BYE: (
        ResponseTemplate(
            "👋 Thanks for chatting! Have a wonderful day and happy shopping! 🛒✨",
            (),
        ),
    ),
    IntentCategory.UNMATCHED: (NO_ANSWER,),
}


class ResponseCatalog:
    """Read-only template table with injectable random selection."""

    def __init__(self, templates: Mapping[IntentCategory, Tuple[ResponseTemplate, ...]] = DEFAULT_TEMPLATES, rng=None):
        self._templates = {category: tuple(items) for category, items in templates.items()}
        self._fallback = self._templates.get(IntentCategory.UNMATCHED) or (NO_ANSWER,)
        self._rng = rng if rng is not None else random.Random()

    def templates_for(self, category: IntentCategory) -> Tuple[ResponseTemplate, ...]:
        return self._templates.get(category) or self._fallback

    def lookup(self, category: IntentCategory) -> ResponseTemplate:
        """Pick one template for `category`; unknown or empty categories use `UNMATCHED`."""
        candidates = self.templates_for(category)
        if len(candidates) == 1:
            return candidates[0]
        return self._rng.choice(candidates)
