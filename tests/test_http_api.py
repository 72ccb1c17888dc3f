import logging

import pytest
from fastapi.testclient import TestClient

from shopassist.api import http_api
from shopassist.core.router import APOLOGY_TEXT
from shopassist.core.session import RouterSession, SessionRegistry
from shopassist.llm.client import TransportError


@pytest.fixture
def transport(scripted_transport):
    return scripted_transport(["The travel mug ($28) keeps coffee hot for 6 hours."])


@pytest.fixture
def client(monkeypatch, transport):
    registry = SessionRegistry(
        factory=lambda **kw: RouterSession(transport=transport, models=("m1", "m2"), **kw)
    )
    monkeypatch.setattr(http_api, "registry", registry)
    monkeypatch.setattr(http_api, "default_credential", lambda: None)
    return TestClient(http_api.app)


def create_session(client, **body):
    response = client.post("/v1/sessions", json=body or None)
    assert response.status_code == 200
    return response.json()


def test_create_session_without_key(client):
    data = create_session(client)
    assert data["configured"] is False
    assert data["history_length"] == 0


def test_faq_message_over_http(client, transport):
    session_id = create_session(client)["session_id"]

    response = client.post(f"/v1/sessions/{session_id}/messages", json={"message": "track my order"})

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "knowledge_base"
    assert data["intent"] == "order_tracking"
    assert transport.calls == []


def test_unmatched_without_key_is_fallback(client):
    session_id = create_session(client)["session_id"]

    data = client.post(
        f"/v1/sessions/{session_id}/messages",
        json={"message": "do you think I should buy a house"},
    ).json()

    assert data["source"] == "fallback"
    assert data["follow_up"] == ["Track order", "Returns", "Shipping info", "Payment help"]


def test_remote_answer_then_clear_history_keeps_key(client):
    session_id = create_session(client, credential="k")["session_id"]

    data = client.post(
        f"/v1/sessions/{session_id}/messages",
        json={"message": "what's a good gift for a coffee lover"},
    ).json()
    assert data["source"] == "remote_model"
    assert data["model"] == "m1"
    assert client.get(f"/v1/sessions/{session_id}").json()["history_length"] == 2

    cleared = client.delete(f"/v1/sessions/{session_id}/history").json()

    assert cleared["history_length"] == 0
    assert cleared["configured"] is True


def test_credential_endpoints(client):
    session_id = create_session(client)["session_id"]

    assert client.put(f"/v1/sessions/{session_id}/credential", json={"credential": "k"}).json()["configured"]
    assert client.put(f"/v1/sessions/{session_id}/credential", json={"credential": "  "}).status_code == 400
    assert client.delete(f"/v1/sessions/{session_id}/credential").json()["configured"] is False


def test_blank_message_rejected(client):
    session_id = create_session(client)["session_id"]
    response = client.post(f"/v1/sessions/{session_id}/messages", json={"message": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "No message provided"}


def test_unknown_session(client):
    assert client.post("/v1/sessions/nope/messages", json={"message": "hi"}).status_code == 404
    assert client.get("/v1/sessions/nope").status_code == 404
    assert client.delete("/v1/sessions/nope").status_code == 404


def test_remote_failure_returns_error_reply(client, transport):
    transport.outcomes = [TransportError("Read timed out")]
    session_id = create_session(client, credential="k")["session_id"]

    data = client.post(f"/v1/sessions/{session_id}/messages", json={"message": "is it waterproof"}).json()

    assert data["source"] == "error"
    assert "Read timed out" in data["text"]
    assert data["follow_up"] == ["Check settings", "Try again"]


def test_unexpected_exception_becomes_apology(client, transport):
    transport.outcomes = [RuntimeError("boom")]
    session_id = create_session(client, credential="k")["session_id"]

    data = client.post(f"/v1/sessions/{session_id}/messages", json={"message": "is it waterproof"}).json()

    assert data["source"] == "error"
    assert data["text"] == APOLOGY_TEXT
    assert data["follow_up"] == ["Try again", "Contact support"]


def test_busy_session_conflict(client):
    session_id = create_session(client)["session_id"]
    session = http_api.registry.get(session_id)

    session._busy.acquire()
    try:
        response = client.post(f"/v1/sessions/{session_id}/messages", json={"message": "hello"})
    finally:
        session._busy.release()

    assert response.status_code == 409


@pytest.fixture
def basic_config_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    package_logger = logging.getLogger("shopassist")
    previous = package_logger.level
    yield calls
    package_logger.setLevel(previous)


def test_debug_flag_logs_incoming_message(client, monkeypatch, caplog, basic_config_calls):
    monkeypatch.setattr(http_api, "DEBUG", True)
    http_api.configure_logging()
    session_id = create_session(client)["session_id"]

    client.post(f"/v1/sessions/{session_id}/messages", json={"message": "hello"})

    assert basic_config_calls == [{"level": logging.INFO}]
    assert "Incoming message" in caplog.text
    assert "Response source" in caplog.text


def test_logging_left_alone_without_debug(monkeypatch, basic_config_calls):
    monkeypatch.setattr(http_api, "DEBUG", False)

    http_api.configure_logging()

    assert basic_config_calls == []


def test_serve_configures_logging_before_running(monkeypatch, basic_config_calls):
    import uvicorn

    runs = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kw: runs.append(kw))
    monkeypatch.setattr(http_api, "DEBUG", True)
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.setenv("PORT", "9001")

    http_api.serve()

    assert basic_config_calls == [{"level": logging.INFO}]
    assert runs == [{"host": "127.0.0.1", "port": 9001}]
