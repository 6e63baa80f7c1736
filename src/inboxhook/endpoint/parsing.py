"""Request body parsing and validation for inbox messages.

Bodies are read with a hard size cap, decoded as JSON or form data
depending on the declared content type, and validated in a fixed order:
agent present, agent well-formed, message present. The first failure
aborts the request.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl

from fastapi import Request
from pydantic import ValidationError

from inboxhook.domain.models import InboxMessage
from inboxhook.endpoint.errors import (
    ERR_AGENT_REQUIRED,
    ERR_INVALID_AGENT,
    ERR_INVALID_FORM,
    ERR_INVALID_JSON,
    ERR_MESSAGE_REQUIRED,
    MessageValidationError,
    PayloadTooLargeError,
)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Only "true" and "1" enable injection in form data
FORM_TRUE_VALUES = ("true", "1")

_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


async def read_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything over ``limit`` bytes.

    Raises:
        PayloadTooLargeError: If the declared or actual size exceeds the limit.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLargeError()
    return bytes(body)


def decode_json(body: bytes) -> InboxMessage:
    try:
        return InboxMessage.model_validate_json(body)
    except ValidationError:
        raise MessageValidationError(ERR_INVALID_JSON) from None


def parse_form(data: str) -> dict[str, str]:
    """Parse urlencoded form data, keeping the first value of each key.

    Raises:
        ValueError: On malformed percent escapes.
    """
    if _BAD_PERCENT_ESCAPE.search(data):
        raise ValueError("malformed percent escape")
    fields: dict[str, str] = {}
    for key, value in parse_qsl(data, keep_blank_values=True):
        fields.setdefault(key, value)
    return fields


def decode_form(body: bytes, content_type: str, query_string: str) -> InboxMessage:
    """Build a message from form fields, body first then query string."""
    try:
        fields = parse_form(query_string)
        if _media_type(content_type) == FORM_CONTENT_TYPE:
            fields = {**fields, **parse_form(body.decode("utf-8"))}
    except (UnicodeDecodeError, ValueError):
        raise MessageValidationError(ERR_INVALID_FORM) from None

    return InboxMessage(
        agent=fields.get("agent", ""),
        message=fields.get("message", ""),
        inject=fields.get("inject", "") in FORM_TRUE_VALUES,
    )


def validate_message(msg: InboxMessage, agent_pattern: re.Pattern[str]) -> None:
    """Check agent and message fields, in order.

    Raises:
        MessageValidationError: On the first failing check.
    """
    if not msg.agent:
        raise MessageValidationError(ERR_AGENT_REQUIRED)
    if not agent_pattern.fullmatch(msg.agent):
        raise MessageValidationError(ERR_INVALID_AGENT)
    if not msg.message:
        raise MessageValidationError(ERR_MESSAGE_REQUIRED)


async def parse_inbox_message(
    request: Request,
    *,
    max_body_bytes: int,
    agent_pattern: re.Pattern[str],
    force_inject: bool = False,
) -> InboxMessage:
    """Read, decode and validate an inbox message from a request.

    Args:
        request: The incoming request.
        max_body_bytes: Maximum accepted body size.
        agent_pattern: Pattern a valid agent identifier must fully match.
        force_inject: Set ``inject`` regardless of what the body says.

    Raises:
        PayloadTooLargeError: If the body exceeds ``max_body_bytes``.
        MessageValidationError: If the body is malformed or a field is invalid.
    """
    body = await read_body(request, max_body_bytes)
    content_type = request.headers.get("content-type", "")

    if JSON_CONTENT_TYPE in content_type:
        msg = decode_json(body)
    else:
        msg = decode_form(body, content_type, request.url.query)

    if force_inject:
        msg = msg.model_copy(update={"inject": True})

    validate_message(msg, agent_pattern)
    return msg


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()
