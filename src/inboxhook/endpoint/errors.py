"""Client-facing request errors.

Each error carries the HTTP status code and the machine-readable error
string that ends up in the ``error`` field of the JSON response.
"""

from __future__ import annotations

# Error strings returned in the "error" field
ERR_UNAUTHORIZED = "unauthorized"
ERR_METHOD_NOT_ALLOWED = "method not allowed"
ERR_NOT_FOUND = "not found"
ERR_BODY_TOO_LARGE = "request body too large"
ERR_INVALID_JSON = "invalid JSON"
ERR_INVALID_FORM = "invalid form data"
ERR_AGENT_REQUIRED = "agent name required"
ERR_INVALID_AGENT = "invalid agent name"
ERR_MESSAGE_REQUIRED = "message required"


class RequestError(Exception):
    """Base class for errors that abort a request with a client-facing status."""

    status_code = 400

    def __init__(self, error: str, status_code: int | None = None) -> None:
        super().__init__(error)
        self.error = error
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(RequestError):
    status_code = 401

    def __init__(self) -> None:
        super().__init__(ERR_UNAUTHORIZED)


class MessageValidationError(RequestError):
    status_code = 400


class PayloadTooLargeError(RequestError):
    status_code = 413

    def __init__(self) -> None:
        super().__init__(ERR_BODY_TOO_LARGE)
