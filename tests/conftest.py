import pathlib
import sys

import pytest

# Project root on the import path when running without an editable install.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class ScriptedTransport:
    """Transport double: replays outcomes in order, records every call.

    An outcome is reply text, an exception instance to raise, or a callable taking
    `(model, window, credential)`.
    """

    name = "gemini"

    def __init__(self, outcomes=None, default="Sure, here you go."):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls = []

    def generate(self, model, window, credential):
        self.calls.append((model, list(window), credential))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if callable(outcome):
            outcome = outcome(model, window, credential)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


@pytest.fixture
def scripted_transport():
    return ScriptedTransport


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture(autouse=True)
def _no_ambient_keys(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("HUGGINGFACE_API_KEY", raising=False)
