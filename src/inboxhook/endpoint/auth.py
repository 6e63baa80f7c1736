"""Static shared-secret authentication.

A request is authenticated when either the ``Authorization`` header is
exactly ``Bearer <token>`` or the ``token`` query parameter equals the
token. Missing and wrong credentials get the same 401. With no token
configured every request passes.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Request

from inboxhook.config.settings import Settings
from inboxhook.endpoint.errors import AuthenticationError

logger = logging.getLogger(__name__)


def _equal(presented: str | None, expected: str) -> bool:
    if presented is None:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def is_authorized(settings: Settings, authorization: str | None, query_token: str | None) -> bool:
    token = settings.auth_token.get_secret_value()
    if not token:
        return True
    if _equal(authorization, f"Bearer {token}"):
        return True
    return _equal(query_token, token)


async def require_token(request: Request) -> None:
    """FastAPI dependency that rejects unauthenticated requests."""
    settings: Settings = request.app.state.settings
    if not is_authorized(
        settings,
        request.headers.get("authorization"),
        request.query_params.get("token"),
    ):
        logger.debug("Rejected unauthenticated %s %s", request.method, request.url.path)
        raise AuthenticationError()
