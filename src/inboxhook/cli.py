"""Command-line interface for inboxhook.

Provides the main entry point for serving the webhook and for listing
the live tmux sessions messages can be injected into.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="inboxhook",
        description="HTTP ingress delivering messages to agent inboxes and tmux sessions",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/inboxhook.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("serve", help="Start the webhook HTTP server")
    subparsers.add_parser("agents", help="List live tmux sessions")

    return parser.parse_args(argv)


async def _list_agents(settings) -> list[str]:
    """Query tmux for live session names; none on failure."""
    from inboxhook.sessions.base import SessionError
    from inboxhook.sessions.tmux import TmuxSessionController

    controller = TmuxSessionController(
        tmux_binary=settings.sessions.tmux_binary,
        timeout=settings.sessions.timeout,
    )
    try:
        return await controller.list_sessions()
    except SessionError as e:
        logger.debug("Session listing failed: %s", e)
        return []


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the inboxhook CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from inboxhook.config.settings import load_settings
    from inboxhook.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings = settings.model_copy(
            update={"logging": settings.logging.model_copy(update={"level": "DEBUG"})}
        )

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting webhook server")
        from inboxhook.endpoint.server import main as serve

        serve(settings)

    elif args.command == "agents":
        for name in asyncio.run(_list_agents(settings)):
            print(name)


if __name__ == "__main__":
    main()
