"""Configuration management for inboxhook.

Loads settings from a YAML configuration file with environment variable
overrides. The plain variables of the webhook contract (INBOX_DIR,
WEBHOOK_ADDR, WEBHOOK_AUTH_TOKEN) take precedence over everything else.
Supports .env files.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/inboxhook.yaml")
DEFAULT_INBOX_DIR = Path("/data/inbox")
DEFAULT_LISTEN_ADDR = ":8080"
DEFAULT_AGENT_PATTERN = r"^[A-Za-z0-9_-]+$"
DEFAULT_MAX_BODY_BYTES = 1 << 20  # 1 MiB

# Plain (unprefixed) environment variables -> top-level settings fields
ENV_OVERRIDES = {
    "INBOX_DIR": "inbox_dir",
    "WEBHOOK_ADDR": "listen_addr",
    "WEBHOOK_AUTH_TOKEN": "auth_token",
}


def parse_listen_addr(addr: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address into its parts.

    An empty host (``":8080"``) binds all interfaces. IPv6 hosts may be
    given in brackets (``"[::1]:8080"``).

    Raises:
        ValueError: If the address has no port or the port is invalid.
    """
    host, sep, port_str = addr.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {addr!r} has no port")
    host = host.strip("[]") or "0.0.0.0"
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"invalid port in listen address {addr!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in listen address {addr!r}")
    return host, port


class SessionsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    tmux_binary: str = Field(default="tmux")
    timeout: float = Field(default=2.0, gt=0, description="Seconds per tmux call")


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    keep_alive_timeout: int = Field(default=60, gt=0)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the inboxhook service.

    Loaded once at startup and passed explicitly to the app factory.
    Instances are immutable; use ``model_copy(update=...)`` to derive
    a variant.
    """

    model_config = {
        "env_prefix": "INBOXHOOK_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    inbox_dir: Path = Field(default=DEFAULT_INBOX_DIR)
    listen_addr: str = Field(default=DEFAULT_LISTEN_ADDR)
    auth_token: SecretStr = Field(default=SecretStr(""))
    agent_pattern: str = Field(default=DEFAULT_AGENT_PATTERN)
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, gt=0)

    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("listen_addr")
    @classmethod
    def _check_listen_addr(cls, value: str) -> str:
        parse_listen_addr(value)
        return value

    @field_validator("agent_pattern")
    @classmethod
    def _check_agent_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid agent pattern: {e}") from e
        return value

    @property
    def host(self) -> str:
        return parse_listen_addr(self.listen_addr)[0]

    @property
    def port(self) -> int:
        return parse_listen_addr(self.listen_addr)[1]

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_token.get_secret_value())

    @property
    def agent_regex(self) -> re.Pattern[str]:
        return re.compile(self.agent_pattern)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: plain contract env vars > YAML file > INBOXHOOK_* env
    vars / .env > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data: dict = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply the unprefixed webhook environment variables.

    An empty value counts as unset.
    """
    for env_key, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_key, "")
        if value:
            yaml_data[field_name] = value
