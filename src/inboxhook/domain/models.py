"""Core domain models for the inboxhook system.

An InboxMessage exists only for the duration of one request; it is
persisted solely as a formatted line in the agent's inbox file. The
response models define the JSON envelope every endpoint answers with.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class InboxMessage(BaseModel):
    """A message addressed to a named agent.

    Types are strict so that a JSON body like ``{"agent": 5}`` is
    rejected as malformed instead of being coerced. ``null`` counts as
    the field being absent. Unknown fields are ignored.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    agent: str = Field(default="", description="Agent identifier")
    message: str = Field(default="", description="Free-form message text")
    inject: bool = Field(default=False, description="Also type into the tmux session")

    @field_validator("agent", "message", "inject", mode="before")
    @classmethod
    def _null_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        # JSON null means "not given", same as an absent field
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class DeliveryResponse(BaseModel):
    """Generic JSON envelope: ``success`` plus an optional message or error."""

    success: bool
    message: str | None = None
    error: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)


class AgentsResponse(BaseModel):
    success: bool = True
    agents: list[str] = Field(default_factory=list)
