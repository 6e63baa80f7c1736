"""Domain models for inboxhook.

This package contains the data structures that flow through a delivery
request: the parsed inbox message and the JSON response envelopes. All
models use Pydantic v2 for validation and serialization.
"""

from inboxhook.domain.models import AgentsResponse, DeliveryResponse, InboxMessage

__all__ = [
    "AgentsResponse",
    "DeliveryResponse",
    "InboxMessage",
]
