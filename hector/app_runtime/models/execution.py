"""Execution snapshot models: the bag of named artifacts and per-action state."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from hector.app_runtime.models.base import DocumentModel
from hector.app_runtime.models.enums import ActionStatus


class BagEntry(DocumentModel):
    """Current value of one artifact (an input or an action output).

    Entries are replaced whole on every write, never merged.
    """

    text_value: str | None = None
    path: str | None = None
    language: str | None = None


class ActionState(DocumentModel):
    """Status and bookkeeping for one action, keyed by action id."""

    status: ActionStatus = ActionStatus.IDLE
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)
    attempts: int = 0
    executed_at: datetime | None = None
    duration_ms: int | None = None


class Execution(DocumentModel):
    """Last-seen execution of an app, persisted alongside its definition."""

    bag: dict[str, BagEntry] = Field(default_factory=dict, description="Artifact filename -> value")
    action_states: dict[str, ActionState] = Field(default_factory=dict, description="Action id -> state")
    error: str | None = None
    timestamp: datetime | None = None
