"""Configuration management for inboxhook.

Loads and validates YAML-based configuration with Pydantic models.
Supports the plain environment variables of the webhook contract
(INBOX_DIR, WEBHOOK_ADDR, WEBHOOK_AUTH_TOKEN) as overrides.
"""

from inboxhook.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
