"""
HTTP API adapter for the ShopAssist router.

Architectural role:
- Expose session-scoped chat endpoints to the browser widget.
- Enforce adapter-level input validation.
- Delegate every routing decision to `RouterSession.route`.
- Serialize `RoutingResult` into JSON.

Endpoint responsibilities:
- `POST   /v1/sessions`: create a session, optionally with a credential.
- `GET    /v1/sessions/{id}`: configuration and window size.
- `PUT    /v1/sessions/{id}/credential`: set the in-memory credential.
- `DELETE /v1/sessions/{id}/credential`: forget the credential.
- `DELETE /v1/sessions/{id}/history`: clear the rolling window (credential kept).
- `POST   /v1/sessions/{id}/messages`: route one message.
- `DELETE /v1/sessions/{id}`: drop the session.

Input validation behavior:
- Unknown session -> HTTP 404.
- Blank message or credential -> HTTP 400.
- Message while another one is pending for the same session -> HTTP 409.

Error handling strategy:
- Remote failures are already folded into `RoutingResult(source="error")` by the
  router and returned with HTTP 200.
- Any unexpected exception while routing is logged and answered with the support
  apology so the widget always receives a renderable reply.

Side effects:
- Sessions live in process memory only (`SessionRegistry`).
- Emits verbose request logs only when `DEBUG == "true"`.
- Loads environment variables at import time via `load_dotenv()`.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shopassist.core.router import apology_result
from shopassist.core.session import SessionBusyError, SessionRegistry
from shopassist.llm.provider_config import default_credential


logger = logging.getLogger(__name__)

app = FastAPI(title="ShopAssist")
# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"


def configure_logging(debug=None):
    """Install a root handler and open the package loggers to INFO when debugging."""
    if debug is None:
        debug = DEBUG
    if not debug:
        return
    logging.basicConfig(level=logging.INFO)
    logging.getLogger("shopassist").setLevel(logging.INFO)


configure_logging()

registry = SessionRegistry()



# ============================================================
# Request Schemas
# ============================================================

class SessionCreateRequest(BaseModel):
    credential: Optional[str] = None


class CredentialRequest(BaseModel):
    credential: str


class MessageRequest(BaseModel):
    message: str


# ============================================================
# Helpers
# ============================================================

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _session_not_found() -> JSONResponse:
    return _error(404, "Unknown session")


def _status(session_id, session) -> dict:
    return {
        "session_id": session_id,
        "configured": session.is_configured(),
        "history_length": len(session.history()),
    }


# ============================================================
# Sessions
# ============================================================

@app.post("/v1/sessions")
def create_session(body: Optional[SessionCreateRequest] = None):
    """Create a session; without an explicit credential the configured key is used."""
    credential = body.credential if body and body.credential else default_credential()
    session_id, session = registry.create(credential=credential)
    return _status(session_id, session)


@app.get("/v1/sessions/{session_id}")
def get_session(session_id: str):
    session = registry.get(session_id)
    if session is None:
        return _session_not_found()
    return _status(session_id, session)


@app.delete("/v1/sessions/{session_id}")
def drop_session(session_id: str):
    if not registry.drop(session_id):
        return _session_not_found()
    return {"session_id": session_id, "dropped": True}


# ============================================================
# Credential / History
# ============================================================

@app.put("/v1/sessions/{session_id}/credential")
def set_credential(session_id: str, body: CredentialRequest):
    session = registry.get(session_id)
    if session is None:
        return _session_not_found()
    if not body.credential.strip():
        return _error(400, "No credential provided")

    session.set_credential(body.credential)
    return _status(session_id, session)


@app.delete("/v1/sessions/{session_id}/credential")
def clear_credential(session_id: str):
    session = registry.get(session_id)
    if session is None:
        return _session_not_found()

    session.clear_credential()
    return _status(session_id, session)


@app.delete("/v1/sessions/{session_id}/history")
def clear_history(session_id: str):
    session = registry.get(session_id)
    if session is None:
        return _session_not_found()

    session.clear_history()
    return _status(session_id, session)


# ============================================================
# Messages
# ============================================================

@app.post("/v1/sessions/{session_id}/messages")
def post_message(session_id: str, body: MessageRequest):
    """
    Route one user message.

    Lifecycle:
    1. Resolve the session and validate the message.
    2. Call `RouterSession.route` (blocking; runs in FastAPI's worker pool).
    3. Return the serialized `RoutingResult`.
    """
    session = registry.get(session_id)
    if session is None:
        return _session_not_found()

    message = body.message.strip()
    if not message:
        return _error(400, "No message provided")

    if DEBUG:
        logger.info("Incoming message for %s: %r", session_id, message)

    try:
        result = session.route(message)
    except SessionBusyError:
        return _error(409, "A message is already being processed for this session")
    except Exception:
        logger.exception("Error processing message for session %s", session_id)
        result = apology_result()

    if DEBUG:
        logger.info("Response source for %s: %s", session_id, result.source.value)

    return result.to_dict()


def serve():
    """Run the API with uvicorn (`HOST` / `PORT` from the environment)."""
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
