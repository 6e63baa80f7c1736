"""tmux backend for session control.

Every operation is a short-lived ``tmux`` invocation bounded by a fixed
timeout. A process that overruns is killed and reported as a timeout;
nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging

from inboxhook.sessions.base import (
    SessionCommandError,
    SessionController,
    SessionTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0


class TmuxSessionController(SessionController):
    """Controls tmux sessions through the tmux CLI.

    Session targets use tmux's ``=name`` syntax so that ``alice`` never
    prefix-matches a session called ``alice2``.
    """

    def __init__(self, tmux_binary: str = "tmux", timeout: float = DEFAULT_TIMEOUT) -> None:
        self._tmux_binary = tmux_binary
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def exists(self, session: str) -> bool:
        try:
            await self._run("has-session", "-t", f"={session}", session=session)
        except SessionCommandError as e:
            logger.debug("has-session failed for %s: %s", session, e)
            return False
        return True

    async def send_text(self, session: str, text: str) -> None:
        await self._run("send-keys", "-t", f"={session}:", "-l", text, session=session)

    async def send_keystroke(self, session: str, key: str) -> None:
        await self._run("send-keys", "-t", f"={session}:", key, session=session)

    async def list_sessions(self) -> list[str]:
        output = await self._run("list-sessions", "-F", "#{session_name}")
        names = output.strip().split("\n")
        if len(names) == 1 and names[0] == "":
            return []
        return names

    async def _run(self, *args: str, session: str = "") -> str:
        """Run one tmux command and return its stdout.

        Raises:
            SessionTimeoutError: If the command does not exit within the timeout.
            SessionCommandError: If tmux is missing or exits non-zero.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self._tmux_binary,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SessionCommandError(
                f"cannot run {self._tmux_binary}: {e}", session=session
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise SessionTimeoutError("tmux command timed out", session=session) from None

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            raise SessionCommandError(
                f"tmux {args[0]} exited with status {proc.returncode}: {detail}",
                session=session,
            )
        return stdout.decode(errors="replace")
