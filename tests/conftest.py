"""Shared test fixtures for the inboxhook test suite.

Provides a fake SessionController standing in for tmux, settings bound
to a temporary inbox directory, and HTTP test clients.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inboxhook.config.settings import Settings
from inboxhook.endpoint.server import create_app
from inboxhook.sessions.base import SessionCommandError, SessionController, SessionError


class FakeSessionController(SessionController):
    """In-memory session controller recording everything typed into it."""

    def __init__(
        self,
        sessions: list[str] | None = None,
        send_error: SessionError | None = None,
        list_error: SessionError | None = None,
    ) -> None:
        self.sessions = list(sessions or [])
        self.send_error = send_error
        self.list_error = list_error
        self.typed: list[tuple[str, str]] = []
        self.keys: list[tuple[str, str]] = []

    async def exists(self, session: str) -> bool:
        return session in self.sessions

    async def send_text(self, session: str, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.typed.append((session, text))

    async def send_keystroke(self, session: str, key: str) -> None:
        self.keys.append((session, key))

    async def list_sessions(self) -> list[str]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.sessions)


# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def inbox_dir(tmp_path: Path) -> Path:
    """Inbox directory that does not exist yet."""
    return tmp_path / "inbox"


@pytest.fixture
def settings(inbox_dir: Path) -> Settings:
    """Settings with auth disabled and a temporary inbox directory."""
    return Settings(inbox_dir=inbox_dir)


@pytest.fixture
def auth_settings(inbox_dir: Path) -> Settings:
    """Settings requiring the token 's3cret'."""
    return Settings(inbox_dir=inbox_dir, auth_token="s3cret")


# ---------------------------------------------------------------------------
# Session / Client Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_sessions() -> FakeSessionController:
    """A fake controller with live sessions 'alice' and 'bob'."""
    return FakeSessionController(sessions=["alice", "bob"])


@pytest.fixture
def client(settings: Settings, fake_sessions: FakeSessionController) -> TestClient:
    app = create_app(settings=settings, sessions=fake_sessions)
    return TestClient(app)


@pytest.fixture
def auth_client(auth_settings: Settings, fake_sessions: FakeSessionController) -> TestClient:
    app = create_app(settings=auth_settings, sessions=fake_sessions)
    return TestClient(app)


@pytest.fixture
def no_server_sessions() -> FakeSessionController:
    """A fake controller behaving like tmux with no server running."""
    return FakeSessionController(list_error=SessionCommandError("no server running"))


@pytest.fixture
def make_sessions() -> type[FakeSessionController]:
    """Factory for fake controllers with custom sessions or failures."""
    return FakeSessionController
