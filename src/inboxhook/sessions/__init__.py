"""Terminal session control for inboxhook.

Types messages into live terminal sessions and lists them via pluggable
backends. The abstract interface keeps the delivery pipeline independent
of tmux so tests can use a fake controller.

Public API:
    SessionController -- Abstract base class
    TmuxSessionController -- tmux CLI backend
"""

from inboxhook.sessions.base import (
    SessionCommandError,
    SessionController,
    SessionError,
    SessionNotFoundError,
    SessionTimeoutError,
)

__all__ = [
    "SessionCommandError",
    "SessionController",
    "SessionError",
    "SessionNotFoundError",
    "SessionTimeoutError",
    "TmuxSessionController",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete backends."""
    if name == "TmuxSessionController":
        from inboxhook.sessions.tmux import TmuxSessionController
        return TmuxSessionController
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
