import logging

from shopassist.api import cli
from shopassist.core.routing_types import ResponseSource, RoutingResult
from shopassist.core.session import RouterSession


def make_session(scripted_transport, credential=None):
    return RouterSession(credential=credential, transport=scripted_transport(), models=("m",))


def test_key_commands(scripted_transport):
    session = make_session(scripted_transport)

    assert cli.handle_command(session, "/key") == "Usage: /key <api key>"
    assert not session.is_configured()

    assert cli.handle_command(session, "/key abc123") == "API key saved for this session."
    assert session.is_configured()

    assert cli.handle_command(session, "/forget-key") == "API key removed."
    assert not session.is_configured()


def test_clear_chat_keeps_key(scripted_transport):
    session = make_session(scripted_transport, credential="k")
    session.route("is the blue kettle any good")

    assert cli.handle_command(session, "Clear chat") == "Chat cleared."
    assert session.history() == []
    assert session.is_configured()


def test_status_and_exit(scripted_transport):
    session = make_session(scripted_transport)
    assert cli.handle_command(session, "/status") == "Remote model: not configured. Turns in context: 0."
    assert cli.handle_command(session, "quit") is False


def test_plain_text_is_not_a_command(scripted_transport):
    assert cli.handle_command(make_session(scripted_transport), "track my order") is None


def test_render_includes_source_and_suggestions():
    result = RoutingResult(text="Hi!", source=ResponseSource.KNOWLEDGE_BASE, follow_up=["Help", "Track my order"])
    assert cli.render(result) == "Hi!\n\n[knowledge_base]\nSuggestions: Help | Track my order"


def test_main_loop(monkeypatch, capsys, scripted_transport):
    lines = iter(["", "hello", "exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    monkeypatch.setattr(cli, "default_credential", lambda: None)

    cli.main()

    out = capsys.readouterr().out
    assert "No API key found" in out
    assert "[knowledge_base]" in out
    assert "Shutting down." in out


def test_main_loop_survives_unexpected_error(monkeypatch, capsys, scripted_transport):
    transport = scripted_transport([RuntimeError("boom")])
    lines = iter(["is it waterproof", "hello", "exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    monkeypatch.setattr(
        cli, "RouterSession",
        lambda credential=None: RouterSession(credential="k", transport=transport, models=("m",)),
    )

    cli.main()

    out = capsys.readouterr().out
    assert "I apologize, but I encountered an issue." in out
    assert "Suggestions: Try again | Contact support" in out
    assert "[knowledge_base]" in out
    assert "Shutting down." in out


def test_unknown_log_level_falls_back_to_warning(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    monkeypatch.setattr("builtins.input", lambda prompt="": "exit")
    monkeypatch.setattr(cli, "default_credential", lambda: None)

    cli.main()

    assert calls == [{"level": logging.WARNING}]
    assert "Shutting down." in capsys.readouterr().out
