"""FastAPI HTTP server for the inbox webhook.

Endpoints:

    ANY  /health  -> {"success": true, "message": "ok"}
    POST /inbox   <- {"agent": "alice", "message": "hi", "inject": false}
    POST /send    <- same as /inbox, injection forced on
    GET  /agents  -> {"success": true, "agents": ["alice", ...]}

/inbox and /send also accept form-encoded fields. Every endpoint except
/health requires the configured token, when one is set. All responses,
errors included, are JSON objects carrying a ``success`` flag.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inboxhook import __version__
from inboxhook.config.settings import Settings, load_settings
from inboxhook.domain.models import AgentsResponse, DeliveryResponse
from inboxhook.endpoint.auth import require_token
from inboxhook.endpoint.errors import ERR_METHOD_NOT_ALLOWED, ERR_NOT_FOUND, RequestError
from inboxhook.endpoint.parsing import parse_inbox_message
from inboxhook.inbox.delivery import DeliveryService
from inboxhook.inbox.writer import InboxWriteError, InboxWriter
from inboxhook.sessions.base import SessionController, SessionError

logger = logging.getLogger(__name__)

MSG_OK = "ok"
MSG_DELIVERED = "message delivered"
MSG_SENT = "message sent"

# /health answers any method
HEALTH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _error_response(error: str, status_code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=DeliveryResponse(success=False, error=error).to_json(),
        headers=headers,
    )


def create_app(
    settings: Settings | None = None,
    sessions: SessionController | None = None,
    writer: InboxWriter | None = None,
) -> FastAPI:
    """Create the webhook application.

    Args:
        settings: Immutable service configuration. Defaults to Settings().
        sessions: Optional pre-configured SessionController (for testing).
            Defaults to a TmuxSessionController built from settings.
        writer: Optional pre-configured InboxWriter (for testing).
    """
    if settings is None:
        settings = Settings()
    if sessions is None:
        from inboxhook.sessions.tmux import TmuxSessionController

        sessions = TmuxSessionController(
            tmux_binary=settings.sessions.tmux_binary,
            timeout=settings.sessions.timeout,
        )
    if writer is None:
        writer = InboxWriter(settings.inbox_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Webhook receiver starting on %s", settings.listen_addr)
        logger.info("Inbox directory: %s", settings.inbox_dir)
        if settings.auth_enabled:
            logger.info("Auth token configured")
        app.state.delivery.writer.ensure_dir()
        yield
        logger.info("Webhook receiver stopped")

    app = FastAPI(
        title="inboxhook",
        description="HTTP ingress delivering messages to agent inboxes and tmux sessions",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.agent_regex = settings.agent_regex
    app.state.delivery = DeliveryService(writer=writer, sessions=sessions)

    # -------------------------------------------------------------------
    # Error rendering
    # -------------------------------------------------------------------

    @app.exception_handler(RequestError)
    async def handle_request_error(request: Request, exc: RequestError) -> JSONResponse:
        return _error_response(exc.error, exc.status_code)

    @app.exception_handler(InboxWriteError)
    async def handle_inbox_write_error(request: Request, exc: InboxWriteError) -> JSONResponse:
        return _error_response(str(exc), 500)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            error = ERR_METHOD_NOT_ALLOWED
        elif exc.status_code == 404:
            error = ERR_NOT_FOUND
        else:
            error = str(exc.detail).lower()
        return _error_response(error, exc.status_code, headers=exc.headers)

    # -------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------

    @app.api_route("/health", methods=HEALTH_METHODS)
    async def health_check() -> JSONResponse:
        return JSONResponse(DeliveryResponse(success=True, message=MSG_OK).to_json())

    async def _deliver(request: Request, force_inject: bool, ok_message: str) -> JSONResponse:
        s: Settings = app.state.settings
        msg = await parse_inbox_message(
            request,
            max_body_bytes=s.max_body_bytes,
            agent_pattern=app.state.agent_regex,
            force_inject=force_inject,
        )
        delivery: DeliveryService = app.state.delivery
        await delivery.deliver(msg)
        return JSONResponse(DeliveryResponse(success=True, message=ok_message).to_json())

    @app.post("/inbox", dependencies=[Depends(require_token)])
    async def receive_inbox(request: Request) -> JSONResponse:
        return await _deliver(request, force_inject=False, ok_message=MSG_DELIVERED)

    @app.post("/send", dependencies=[Depends(require_token)])
    async def receive_send(request: Request) -> JSONResponse:
        return await _deliver(request, force_inject=True, ok_message=MSG_SENT)

    @app.get("/agents", dependencies=[Depends(require_token)])
    async def list_agents() -> AgentsResponse:
        delivery: DeliveryService = app.state.delivery
        try:
            names = await delivery.sessions.list_sessions()
        except SessionError as e:
            # Usually no tmux server is running, i.e. zero sessions
            logger.debug("Session listing failed, reporting none: %s", e)
            names = []
        return AgentsResponse(success=True, agents=names)

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the webhook server."""
    if settings is None:
        settings = load_settings()
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.server.keep_alive_timeout,
        # logging is configured by setup_logging
        log_config=None,
    )


if __name__ == "__main__":
    main()
