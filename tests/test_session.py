import random

import pytest

from shopassist.core.routing_types import ResponseSource
from shopassist.core.session import RouterSession, SessionBusyError, SessionRegistry
from shopassist.knowledge.intent_matcher import IntentCategory


def test_credential_round_trip_survives_clear_history(scripted_transport):
    session = RouterSession(transport=scripted_transport(), models=("m",))
    assert not session.is_configured()

    session.set_credential("abc")
    session.route("what's a good gift for a coffee lover")
    assert session.is_configured()
    assert len(session.history()) == 2

    session.clear_history()

    assert session.history() == []
    assert session.is_configured()


def test_sessions_do_not_share_windows(scripted_transport):
    first = RouterSession(credential="k", transport=scripted_transport(), models=("m",))
    second = RouterSession(credential="k", transport=scripted_transport(), models=("m",))

    first.route("is the blue kettle any good")

    assert len(first.history()) == 2
    assert second.history() == []


def test_route_is_not_reentrant(scripted_transport):
    session = RouterSession(transport=scripted_transport(), models=("m",))
    session._busy.acquire()
    try:
        with pytest.raises(SessionBusyError):
            session.route("hello")
    finally:
        session._busy.release()

    assert session.route("hello").source is ResponseSource.KNOWLEDGE_BASE


def test_session_exposes_core_operations(scripted_transport):
    session = RouterSession(rng=random.Random(1), transport=scripted_transport(["hi"]), models=("m",))

    assert session.classify("hello") is IntentCategory.GREETING
    assert not session.lookup(IntentCategory.GREETING).is_no_answer
    assert session.converse("hey").status.value == "unconfigured"

    session.set_credential("k")
    assert session.converse("hey").text == "hi"

    session.clear_credential()
    assert not session.is_configured()


def test_history_limit_override(scripted_transport):
    session = RouterSession(credential="k", transport=scripted_transport(), models=("m",), history_limit=4)
    for i in range(3):
        session.route(f"open question {i}")
    assert len(session.history()) == 4


def test_registry_create_get_drop(scripted_transport):
    registry = SessionRegistry(factory=lambda **kw: RouterSession(transport=scripted_transport(), **kw))

    session_id, session = registry.create(credential=None)

    assert registry.get(session_id) is session
    assert len(registry) == 1
    assert registry.drop(session_id)
    assert registry.get(session_id) is None
    assert not registry.drop(session_id)
