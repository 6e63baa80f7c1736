"""Inbox persistence and delivery for inboxhook.

Public API:
    InboxWriter -- Appends timestamped lines to per-agent inbox files
    DeliveryService -- Inbox write plus best-effort session injection
"""

from inboxhook.inbox.delivery import DeliveryService
from inboxhook.inbox.writer import InboxWriteError, InboxWriter

__all__ = ["DeliveryService", "InboxWriteError", "InboxWriter"]
