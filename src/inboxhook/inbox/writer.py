"""Append-only per-agent inbox files.

Each agent has one plain-text file, ``<inbox_dir>/<agent>.txt``. Every
delivered message becomes one entry::

    [2025-01-01 12:00:00] hello

Files are opened with O_APPEND and each entry is handed to a single
write() call, so concurrent writers to the same agent never interleave
partial lines. No in-process locking is used on top of that.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
INBOX_SUFFIX = ".txt"
DIR_MODE = 0o755
FILE_MODE = 0o644

LOG_PREVIEW_CHARS = 50

ERR_INVALID_PATH = "invalid inbox path"


class InboxWriteError(Exception):
    """Raised when an inbox directory or file cannot be created or written."""


def format_entry(message: str, timestamp: datetime | None = None) -> str:
    """Format one inbox line. Embedded newlines are kept as-is."""
    ts = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"[{ts}] {message}\n"


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class InboxWriter:
    """Appends timestamped messages to per-agent inbox files.

    Agent names are validated upstream; the writer additionally refuses
    any name whose file would land outside the inbox directory.

    Usage::

        writer = InboxWriter(Path("/data/inbox"))
        path = await writer.append("alice", "hello")
    """

    def __init__(self, inbox_dir: Path | str) -> None:
        self._inbox_dir = Path(inbox_dir)

    @property
    def inbox_dir(self) -> Path:
        return self._inbox_dir

    def path_for(self, agent: str) -> Path:
        """Return the inbox file for an agent.

        The file must sit directly inside the inbox directory, whatever
        agent pattern is configured.

        Raises:
            InboxWriteError: If the agent name would escape the inbox directory.
        """
        path = self._inbox_dir / f"{agent}{INBOX_SUFFIX}"
        if (
            any(sep in agent for sep in (os.sep, os.altsep, "\x00") if sep)
            or path.resolve().parent != self._inbox_dir.resolve()
        ):
            logger.error("Refusing inbox path outside %s for agent %r", self._inbox_dir, agent)
            raise InboxWriteError(ERR_INVALID_PATH)
        return path

    def ensure_dir(self) -> None:
        """Create the inbox directory if it does not exist.

        Raises:
            InboxWriteError: If the directory cannot be created.
        """
        try:
            os.makedirs(self._inbox_dir, DIR_MODE, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create inbox directory %s: %s", self._inbox_dir, e)
            raise InboxWriteError("failed to create inbox directory") from e

    async def append(self, agent: str, message: str) -> Path:
        """Append one entry to the agent's inbox file.

        Creates the directory and file on first use. The file is closed
        before this returns.

        Returns:
            The path of the inbox file written to.

        Raises:
            InboxWriteError: If the directory or file cannot be created
                or written. Nothing is retried.
        """
        entry = format_entry(message).encode("utf-8")
        path = self.path_for(agent)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._append_sync, path, entry)

        logger.info("Inbox message for %s: %s", agent, truncate(message, LOG_PREVIEW_CHARS))
        return path

    def _append_sync(self, path: Path, data: bytes) -> None:
        self.ensure_dir()
        try:
            fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, FILE_MODE)
        except OSError as e:
            logger.error("Cannot open inbox file %s: %s", path, e)
            raise InboxWriteError("failed to write to inbox") from e
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view)
                view = view[written:]
        except OSError as e:
            logger.error("Cannot write inbox file %s: %s", path, e)
            raise InboxWriteError("failed to write to inbox") from e
        finally:
            os.close(fd)
