"""
Interactive CLI adapter for the ShopAssist router.

Architectural role:
- Provides a terminal interface over one `RouterSession`.
- Delegates every routing decision to `RouterSession.route`.

Request lifecycle (per user turn, CLI):
1. Read a single line from stdin.
2. Handle local control commands:
   - `exit` / `quit`
   - `clear chat` / `empty chat` (clears the window, keeps the key)
   - `/key <credential>`, `/forget-key`, `/status`
3. Route regular messages and print the reply, its source and suggestions.

Input validation behavior:
- Empty input is ignored and does not call core.
- `/key` without a value prints usage and changes nothing.

Error handling strategy:
- Handles EOF and keyboard interrupts without traceback output.
- Remote failures arrive as `source=error` replies and are printed as such.
- Any other exception while routing is logged and answered with the support
  apology; the loop keeps running.
- An unknown `LOG_LEVEL` falls back to WARNING.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
import sys

from shopassist.core.router import apology_result
from shopassist.core.session import RouterSession
from shopassist.llm.provider_config import default_credential, log_level


logger = logging.getLogger(__name__)


# =========================================================
# UTF-8 SAFE STDOUT
# Configures best-effort UTF-8 console output without failing startup.
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (OSError, ValueError):
        pass


def render(result) -> str:
    """Format a `RoutingResult` for the terminal."""
    lines = [result.text, "", f"[{result.source.value}]"]
    if result.follow_up:
        lines.append("Suggestions: " + " | ".join(result.follow_up))
    return "\n".join(lines)


def handle_command(session: RouterSession, line: str):
    """Apply a local control command.

    Returns:
        Text to print, `False` to stop the loop, or `None` when `line` is not a
        command and should be routed.
    """
    lowered = line.lower()

    if lowered in ("exit", "quit"):
        return False

    if lowered in ("clear chat", "empty chat"):
        session.clear_history()
        return "Chat cleared."

    if lowered == "/forget-key":
        session.clear_credential()
        return "API key removed."

    if lowered == "/status":
        state = "configured" if session.is_configured() else "not configured"
        return f"Remote model: {state}. Turns in context: {len(session.history())}."

    if lowered == "/key" or lowered.startswith("/key "):
        value = line[len("/key"):].strip()
        if not value:
            return "Usage: /key <api key>"
        session.set_credential(value)
        return "API key saved for this session."

    return None


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def main():
    """Run the interactive terminal session."""
    logging.basicConfig(level=log_level(os.getenv("LOG_LEVEL", "WARNING")))

    session = RouterSession(credential=default_credential())

    print("ShopAssist AI started. (Type 'exit' to quit)\n")
    if not session.is_configured():
        print("No API key found. Use '/key <api key>' to enable AI answers.")
    print("-" * 60)

    while True:

        try:
            line = input("You: ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not line:
            continue

        outcome = handle_command(session, line)
        if outcome is False:
            print("Shutting down.")
            break
        if outcome is not None:
            print(outcome)
            continue

        try:
            result = session.route(line)
        except Exception:
            logger.exception("Error processing message")
            result = apology_result()

        print()
        print(render(result))
        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
