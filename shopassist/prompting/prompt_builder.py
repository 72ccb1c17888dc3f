"""Request-body assembly helpers used by the remote model transports.

This module is intentionally narrow: it only turns an already-trimmed conversation
window into provider payload fragments. Window bookkeeping, failover and transport
happen outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of payload components.
    - No hidden side effects (no I/O, no global state mutation).

Window items are duck-typed: anything with `role` ("user" / "model") and `text`
attributes is accepted.
"""

from typing import List

from shopassist.llm.provider_config import (
    MAX_OUTPUT_TOKENS,
    TEMPERATURE,
    TOP_K,
    TOP_P,
)


# =========================================================
# SYSTEM INSTRUCTION
# =========================================================
# Sent as the first user turn of every generative request, followed by the
# synthetic model acknowledgement below and then the rolling window.

SYSTEM_INSTRUCTION = """You are ShopAssist AI, a friendly and knowledgeable customer support chatbot for an e-commerce store called "ShopAssist".

YOUR PERSONALITY:
- Warm, professional, and genuinely enthusiastic about helping customers
- Conversational but efficient - don't ramble
- Use emojis sparingly to add warmth (1-2 per response max)

PRODUCT KNOWLEDGE - You sell products in these categories:

ELECTRONICS & GADGETS:
- Smart home devices (speakers, lights, thermostats)
- Headphones & earbuds ($29-$349)
- Portable chargers & power banks
- Wireless keyboards & mice
- Streaming devices (Roku, Fire TV, Chromecast)

FASHION & APPAREL:
- Men's & women's casual wear
- Athletic wear & activewear
- Accessories (watches, bags, sunglasses)
- Seasonal collections

HOME & LIVING:
- Kitchen gadgets & appliances
- Bedding & linens
- Organization & storage solutions
- Decor items

BEAUTY & PERSONAL CARE:
- Skincare sets & individual products
- Hair care tools & products
- Makeup & cosmetics
- Personal grooming devices

SPORTS & FITNESS:
- Yoga mats & accessories
- Resistance bands & weights
- Fitness trackers
- Water bottles & gym bags

GIFT RECOMMENDATION EXAMPLES:
- Coffee lover: Premium coffee maker ($79), electric grinder ($45), coffee subscription box ($25/mo), insulated travel mug ($28)
- Tech enthusiast: Wireless earbuds ($129), smart home starter kit ($99), portable power bank ($35)
- Fitness fan: Smart water bottle ($45), yoga mat set ($55), resistance band kit ($32)
- Home cook: Air fryer ($89), knife set ($120), smart kitchen scale ($35)

STORE POLICIES:
- Shipping: Standard 5-7 days ($4.99), Express 2-3 days ($9.99), Next Day ($14.99). FREE on orders $50+
- Returns: 30 days, unused items in original packaging. Free return shipping.
- Payment: Visa, Mastercard, Amex, Discover, PayPal, Apple Pay, Google Pay, Affirm, Klarna

RESPONSE GUIDELINES:
1. For product questions: Suggest 2-4 specific items with prices
2. For gift recommendations: Ask about budget if not mentioned, then give personalized suggestions
3. Keep responses under 150 words unless the question requires more detail
4. Always offer to help further or provide more options
5. If you don't know something specific, offer to connect them with a human agent

NEVER:
- Make up product names that don't fit the categories above
- Provide false information about policies
- Be pushy or use high-pressure sales tactics"""

PRIMING_REPLY = (
    "Understood! I am ShopAssist AI, ready to help with product recommendations, "
    "orders, returns, and more. How can I assist you today?"
)


def _content(role: str, text: str) -> dict:
    return {"role": role, "parts": [{"text": str(text)}]}


def build_gemini_contents(window) -> List[dict]:
    """Build the ordered `contents` list for a generative request.

    Prompt component order:
        1) `SYSTEM_INSTRUCTION` as a user turn
        2) `PRIMING_REPLY` as a model turn
        3) every window turn, oldest first

    The latest user message is expected to already be the last window entry.
    """
    contents = [
        _content("user", SYSTEM_INSTRUCTION),
        _content("model", PRIMING_REPLY),
    ]
    for turn in window:
        contents.append(_content(turn.role, turn.text))
    return contents


def build_generation_config() -> dict:
    """Return the fixed sampling parameters in generative-API field names."""
    return {
        "temperature": TEMPERATURE,
        "topK": TOP_K,
        "topP": TOP_P,
        "maxOutputTokens": MAX_OUTPUT_TOKENS,
    }


def build_inference_inputs(window) -> dict:
    """Map the window onto the conversational inference input shape.

    The last user turn becomes `text`; earlier user turns and all model turns are
    split into `past_user_inputs` and `generated_responses`.
    """
    turns = list(window)
    latest = ""
    if turns and turns[-1].role == "user":
        latest = turns.pop().text

    return {
        "past_user_inputs": [t.text for t in turns if t.role == "user"],
        "generated_responses": [t.text for t in turns if t.role == "model"],
        "text": latest,
    }
