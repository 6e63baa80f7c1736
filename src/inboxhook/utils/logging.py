"""Logging setup for the webhook process.

Both the ``inboxhook`` logger tree and uvicorn's loggers (``uvicorn``,
with ``uvicorn.error`` and ``uvicorn.access`` propagating into it) share
one set of handlers, so request logs and delivery logs land in the same
stream and file with the same format. uvicorn must be started with
``log_config=None`` so it leaves this setup alone.
"""

from __future__ import annotations

import logging
import sys

from inboxhook.config.settings import LoggingConfig

APP_LOGGER = "inboxhook"
SERVER_LOGGER = "uvicorn"


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _install(logger: logging.Logger, handlers: list[logging.Handler], level: int) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        # shared handlers are closed once, via the app logger
        if logger.name == APP_LOGGER:
            old.close()
    logger.setLevel(level)
    for handler in handlers:
        logger.addHandler(handler)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install handlers on the app and server loggers.

    Calling it again replaces the handlers from the previous call, so
    the CLI can reconfigure after parsing ``-v``.
    """
    if config is None:
        config = LoggingConfig()

    level = getattr(logging, config.level.upper(), logging.INFO)
    handlers = _build_handlers(config)
    _install(logging.getLogger(APP_LOGGER), handlers, level)
    _install(logging.getLogger(SERVER_LOGGER), handlers, level)

    logging.getLogger(APP_LOGGER).info(
        "Logging initialized at %s level%s",
        config.level,
        f", also writing to {config.file}" if config.file else "",
    )
