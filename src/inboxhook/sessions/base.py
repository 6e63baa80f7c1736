"""Abstract base class for terminal session control.

All session backends must conform to this interface, so the delivery
pipeline can inject into live sessions and the HTTP layer can list them
without knowing which terminal multiplexer sits underneath. Tests swap
in a fake implementation instead of driving a real tmux server.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class SessionController(ABC):
    """Abstract interface for observing and typing into terminal sessions.

    Sessions are owned and lifecycle-managed outside this system; a
    controller only checks whether one exists, types into it, and lists
    the live ones.

    Example usage::

        controller = TmuxSessionController(timeout=2.0)
        if await controller.exists("alice"):
            await controller.send("alice", "hello")
        names = await controller.list_sessions()
    """

    @abstractmethod
    async def exists(self, session: str) -> bool:
        """Return True if a live session with exactly this name exists.

        Raises:
            SessionTimeoutError: If the existence check does not finish in time.
        """
        ...

    @abstractmethod
    async def send_text(self, session: str, text: str) -> None:
        """Type literal text into the session's active pane.

        Does NOT press Enter afterwards.

        Raises:
            SessionError: If the text cannot be delivered.
        """
        ...

    @abstractmethod
    async def send_keystroke(self, session: str, key: str) -> None:
        """Press a single named key (e.g. 'Enter') in the session's active pane.

        Raises:
            SessionError: If the key cannot be delivered.
        """
        ...

    @abstractmethod
    async def list_sessions(self) -> list[str]:
        """Return the names of all live sessions.

        Raises:
            SessionError: If the multiplexer cannot be queried, which
                commonly just means no server (and so no session) is running.
        """
        ...

    async def send(self, session: str, text: str) -> None:
        """Type a message into a session and press Enter.

        Checks that the session exists first.

        Raises:
            SessionNotFoundError: If no session has this exact name.
            SessionTimeoutError: If any step exceeds the timeout.
            SessionError: For any other delivery failure.
        """
        if not await self.exists(session):
            raise SessionNotFoundError(f"session not found: {session}", session=session)
        await self.send_text(session, text)
        await self.send_keystroke(session, "Enter")


class SessionError(Exception):
    """Raised when a session operation fails."""

    def __init__(self, message: str, session: str = "") -> None:
        super().__init__(message)
        self.session = session


class SessionNotFoundError(SessionError):
    """Raised when the target session does not exist."""


class SessionTimeoutError(SessionError):
    """Raised when a multiplexer command exceeds its time limit."""


class SessionCommandError(SessionError):
    """Raised when a multiplexer command fails or cannot be started."""
