"""Provider-specific transport for remote model requests.

Architectural role:
    Executes one HTTP request against a configured model endpoint and turns the
    outcome into reply text or a typed `RemoteModelError`.

Model invocation flow:
    `RemoteModelClient.converse` -> `transport.generate(model, window, credential)`
    -> provider branch (generative / inference) -> parsed text or raised error.

Retry behavior:
    No retry loop is implemented here. Each call is attempted once with
    `REQUEST_TIMEOUT`. Model failover is owned by `remote_client`.

Failure handling model:
    - `InvalidCredentialError`: HTTP 400 whose message mentions the API key.
    - `ModelIncompatibleError`: message says the model is not found, not
      supported or not available.
    - `NoResponseGeneratedError`: 2xx body without reply text.
    - `TransportError`: `requests` connection/timeout errors.
    - `RemoteModelError`: anything else, message preserved verbatim.
"""

import logging

import requests

from shopassist.llm.provider_config import (
    GEMINI_URL_TEMPLATE,
    HF_API_URL,
    REQUEST_TIMEOUT,
)
from shopassist.prompting.prompt_builder import (
    build_gemini_contents,
    build_generation_config,
    build_inference_inputs,
)


logger = logging.getLogger(__name__)

INVALID_CREDENTIAL_DETAIL = "Invalid API key. Please check your settings."
NO_RESPONSE_DETAIL = "No response generated"

MODEL_INCOMPATIBLE_MARKERS = ("not found", "supported", "not available")

SHORT_REPLY_LENGTH = 50
SHORT_REPLY_SUFFIX = "\n\nIs there anything specific I can help you with?"


class RemoteModelError(Exception):
    """Base class for failures of a single remote attempt."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ModelIncompatibleError(RemoteModelError):
    """The requested model id is unknown or unsupported by the endpoint."""


class InvalidCredentialError(RemoteModelError):
    """The endpoint rejected the API key."""


class NoResponseGeneratedError(RemoteModelError):
    """The endpoint answered but produced no usable text."""


class TransportError(RemoteModelError):
    """Connection, DNS or timeout failure before any HTTP status was read."""


def classify_error(status_code, message) -> RemoteModelError:
    """Map a failed HTTP exchange onto the error taxonomy.

    Credential problems are checked first so they are never mistaken for a
    model incompatibility and retried.
    """
    message = str(message or "Unknown error")
    if status_code == 400 and "API key" in message:
        return InvalidCredentialError(INVALID_CREDENTIAL_DETAIL, status_code)

    lowered = message.lower()
    if any(marker in lowered for marker in MODEL_INCOMPATIBLE_MARKERS):
        return ModelIncompatibleError(message, status_code)

    return RemoteModelError(message, status_code)


def _json_or_none(response):
    try:
        return response.json()
    except ValueError:
        return None


def _post(url, headers, body):
    """POST once, translating `requests` failures into `TransportError`."""
    try:
        return requests.post(url, headers=headers, json=body, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as err:
        raise TransportError(str(err)) from err


class GeminiTransport:
    """Generative-language endpoint (`<model>:generateContent`)."""

    name = "gemini"

    def __init__(self, url_template=GEMINI_URL_TEMPLATE):
        self.url_template = url_template

    def generate(self, model: str, window, credential: str) -> str:
        """Send the instruction, priming exchange and window; return reply text."""
        url = self.url_template.format(model=model)
        headers = {
            "x-goog-api-key": credential,
            "Content-Type": "application/json",
        }
        body = {
            "contents": build_gemini_contents(window),
            "generationConfig": build_generation_config(),
        }

        response = _post(url, headers, body)
        data = _json_or_none(response)

        if not response.ok:
            message = None
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                message = data["error"].get("message")
            logger.error("Generative API error (%s): HTTP %s %s", model, response.status_code, message)
            raise classify_error(response.status_code, message or "Unknown error")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None

        if not text:
            raise NoResponseGeneratedError(NO_RESPONSE_DETAIL, response.status_code)

        return text


class InferenceTransport:
    """Generic hosted-inference endpoint for conversational models."""

    name = "inference"

    def __init__(self, base_url=HF_API_URL):
        self.base_url = base_url

    def generate(self, model: str, window, credential: str) -> str:
        """Send the window as conversational inputs; return reply text."""
        headers = {"Content-Type": "application/json"}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"

        body = {
            "inputs": build_inference_inputs(window),
            "options": {"wait_for_model": True},
        }

        response = _post(f"{self.base_url}{model}", headers, body)
        data = _json_or_none(response)

        if not response.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            logger.error("Inference API error (%s): HTTP %s %s", model, response.status_code, message)
            raise classify_error(response.status_code, message or f"API error: {response.status_code}")

        if isinstance(data, list) and data:
            data = data[0]

        if isinstance(data, dict):
            if data.get("generated_text"):
                return _format_reply(data["generated_text"])
            if data.get("error"):
                raise classify_error(response.status_code, data["error"])

        raise NoResponseGeneratedError(NO_RESPONSE_DETAIL, response.status_code)


def _format_reply(text: str) -> str:
    """Trim inference output and nudge the user when the reply is very short."""
    formatted = text.strip()
    if len(formatted) < SHORT_REPLY_LENGTH:
        formatted += SHORT_REPLY_SUFFIX
    return formatted


TRANSPORTS = {
    GeminiTransport.name: GeminiTransport,
    InferenceTransport.name: InferenceTransport,
}


def build_transport(provider: str):
    """Instantiate the transport registered under `provider`."""
    try:
        return TRANSPORTS[provider]()
    except KeyError:
        raise ValueError(f"Unknown provider: {provider!r}") from None
