"""Provider/runtime configuration for the remote model layer.

Architectural role:
    Centralizes provider selection, model failover order, endpoints and credential
    lookup for `shopassist.llm.client` and `shopassist.llm.remote_client`.

Model call flow integration:
    - `remote_client.RemoteModelClient` consumes `MODEL_FALLBACKS` and
      `HISTORY_LIMIT`.
    - `client` transports consume endpoint templates and `REQUEST_TIMEOUT`.
    - `prompting.prompt_builder` consumes the generation constants.

Determinism:
    Deterministic for a fixed process environment and key files. Values are resolved
    at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; sessions created without a key
    simply stay unconfigured and route unmatched messages to the generic fallback.
"""

import logging
import os
from dotenv import load_dotenv

load_dotenv()


def _split_models(raw: str) -> tuple:
    """Parse a comma-separated model list, dropping blanks."""
    return tuple(name.strip() for name in raw.split(",") if name.strip())


# Active transport: "gemini" (generative endpoint) or "inference" (generic endpoint).
PROVIDER = os.getenv("PROVIDER", "gemini")

# Ordered failover lists. Index 0 is the primary model.
MODEL_FALLBACKS = _split_models(
    os.getenv("MODEL_FALLBACKS", "gemini-1.5-flash,gemini-1.5-flash-latest")
)
INFERENCE_MODELS = _split_models(
    os.getenv("INFERENCE_MODELS", "microsoft/DialoGPT-medium")
)

GEMINI_URL_TEMPLATE = os.getenv(
    "GEMINI_URL_TEMPLATE",
    "https://generativelanguage.googleapis.com/v1/models/{model}:generateContent",
)

HF_API_URL = os.getenv("HF_API_URL", "https://api-inference.huggingface.co/models/")

# Key files used when no credential is passed explicitly.
KEY_FILES = {
    "gemini": "config/gemini.key",
    "inference": "config/huggingface.key",
}

# Rolling conversation window size, in turns.
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "20"))

# Seconds per HTTP attempt. Timeouts surface as transport failures, never retried.
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Fixed generation parameters; not user-configurable.
TEMPERATURE = 0.7
TOP_K = 40
TOP_P = 0.95
MAX_OUTPUT_TOKENS = 800


def models_for(provider):
    """Return the failover list belonging to a provider name."""
    if provider == "inference":
        return INFERENCE_MODELS
    return MODEL_FALLBACKS


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing file or empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def default_credential(provider=None):
    """Resolve the startup credential for a provider, or `None`."""
    return load_key(KEY_FILES.get(provider or PROVIDER))


def log_level(name, default=logging.WARNING):
    """Map a level name such as "info" to its `logging` constant.

    Unknown or empty names fall back to `default` instead of failing startup.
    """
    level = logging.getLevelName(str(name or "").strip().upper())
    if isinstance(level, int):
        return level
    return default
