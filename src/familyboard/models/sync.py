"""Pydantic models for sync poller cycles."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SyncOutcome(str, Enum):
    """What a single poll cycle ended up doing."""

    NO_CHANGE = "no_change"
    PULLED = "pulled"
    PULL_FAILED = "pull_failed"


class SyncCycleResult(BaseModel):
    """Result of one Check -> Compare -> Pull -> Notify pass."""

    outcome: SyncOutcome
    checked_at: datetime
    fetch_ok: bool = Field(description="Whether the fetch step succeeded")
    remote_tip: str = Field(default="", description="Remote branch tip seen this cycle")
    remote_branch: str = Field(default="", description="Remote branch the tip was read from")
    pointer_before: str = Field(default="")
    pointer_after: str = Field(default="")
    error: str | None = None
