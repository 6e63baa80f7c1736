"""Message delivery pipeline.

Writes a validated message to the agent's inbox file, then, if asked,
types it into the agent's live terminal session. The inbox write is the
authoritative success signal; injection is best-effort and its failures
are only logged.
"""

from __future__ import annotations

import logging

from inboxhook.domain.models import InboxMessage
from inboxhook.inbox.writer import InboxWriter
from inboxhook.sessions.base import SessionController, SessionError

logger = logging.getLogger(__name__)


class DeliveryService:
    """Delivers inbox messages to files and, optionally, live sessions."""

    def __init__(self, writer: InboxWriter, sessions: SessionController) -> None:
        self._writer = writer
        self._sessions = sessions

    @property
    def writer(self) -> InboxWriter:
        return self._writer

    @property
    def sessions(self) -> SessionController:
        return self._sessions

    async def deliver(self, msg: InboxMessage) -> bool:
        """Deliver one message.

        Returns:
            True if the message was also injected into a live session.

        Raises:
            InboxWriteError: If the inbox write fails. Injection is not
                attempted in that case.
        """
        await self._writer.append(msg.agent, msg.message)

        if not msg.inject:
            return False
        try:
            await self._sessions.send(msg.agent, msg.message)
        except SessionError as e:
            logger.warning("Failed to inject into session %s: %s", msg.agent, e)
            return False
        logger.debug("Injected message into session %s", msg.agent)
        return True
