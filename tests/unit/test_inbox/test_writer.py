"""Tests for the append-only inbox writer."""

from __future__ import annotations

import asyncio
import os
import re
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from inboxhook.inbox.writer import InboxWriteError, InboxWriter, format_entry, truncate

LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] msg-\d+$")


class TestFormatEntry:
    def test_format(self) -> None:
        entry = format_entry("hello", datetime(2025, 1, 2, 3, 4, 5))
        assert entry == "[2025-01-02 03:04:05] hello\n"

    def test_newlines_not_escaped(self) -> None:
        entry = format_entry("a\nb", datetime(2025, 1, 2, 3, 4, 5))
        assert entry == "[2025-01-02 03:04:05] a\nb\n"


class TestTruncate:
    def test_short_text_unchanged(self) -> None:
        assert truncate("abc", 5) == "abc"

    def test_long_text_cut(self) -> None:
        assert truncate("abcdef", 3) == "abc..."


class TestInboxWriter:
    def test_path_for(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path)
        assert writer.path_for("alice") == tmp_path / "alice.txt"

    @pytest.mark.parametrize("agent", ["../escaped", "a/b", "../../etc/passwd", "bad\x00name"])
    def test_path_for_stays_inside_inbox(self, tmp_path: Path, agent: str) -> None:
        writer = InboxWriter(tmp_path / "inbox")
        with pytest.raises(InboxWriteError, match="invalid inbox path"):
            writer.path_for(agent)

    @pytest.mark.asyncio
    async def test_append_refuses_escaping_name(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path / "inbox")
        with pytest.raises(InboxWriteError):
            await writer.append("../escaped", "hello")
        assert not (tmp_path / "escaped.txt").exists()
        assert not (tmp_path / "inbox").exists()

    @pytest.mark.asyncio
    async def test_append_creates_dir_and_file(self, tmp_path: Path) -> None:
        inbox = tmp_path / "nested" / "inbox"
        writer = InboxWriter(inbox)
        path = await writer.append("alice", "hello")
        assert path == inbox / "alice.txt"
        content = path.read_text()
        assert content.endswith("] hello\n")
        assert content.count("\n") == 1

    @pytest.mark.asyncio
    async def test_append_is_append_only(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path)
        (tmp_path / "alice.txt").write_text("existing\n")
        await writer.append("alice", "new")
        lines = (tmp_path / "alice.txt").read_text().splitlines()
        assert lines[0] == "existing"
        assert lines[1].endswith("] new")

    @pytest.mark.asyncio
    async def test_concurrent_appends_do_not_interleave(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path)
        await asyncio.gather(*(writer.append("alice", f"msg-{i}") for i in range(50)))
        lines = (tmp_path / "alice.txt").read_text().splitlines()
        assert len(lines) == 50
        assert all(LINE_RE.match(line) for line in lines)
        assert sorted(line.split("] ")[1] for line in lines) == sorted(
            f"msg-{i}" for i in range(50)
        )

    @pytest.mark.asyncio
    async def test_directory_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        writer = InboxWriter(blocker)
        with pytest.raises(InboxWriteError, match="failed to create inbox directory"):
            await writer.append("alice", "hello")

    @pytest.mark.asyncio
    async def test_open_failure(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path)
        with patch("os.open", side_effect=PermissionError("denied")):
            with pytest.raises(InboxWriteError, match="failed to write to inbox"):
                await writer.append("alice", "hello")

    @pytest.mark.asyncio
    async def test_write_failure_closes_file(self, tmp_path: Path) -> None:
        writer = InboxWriter(tmp_path)
        with patch("os.write", side_effect=OSError(28, "No space left on device")), \
                patch("os.close", wraps=os.close) as mock_close:
            with pytest.raises(InboxWriteError, match="failed to write to inbox"):
                await writer.append("alice", "hello")
        mock_close.assert_called_once()
