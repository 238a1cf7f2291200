"""Pydantic models for ledger events."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

LedgerEventType = Literal[
    "STORE_INITIALIZED",
    "ARTIFACT_SAVED",
    "ARTIFACT_COMMIT_FAILED",
    "ARTIFACT_PUSH_FAILED",
    "SYNC_PULLED",
    "SYNC_PULL_FAILED",
]


class LedgerEvent(BaseModel):
    """Append-only ledger event record.

    Written as JSONL to <home>/.board/ledger.jsonl.
    Never mutate or delete; only append.
    """

    event_id: str = Field(description="Unique event identifier (uuid4)")
    run_id: str = Field(description="Run/session identifier (uuid4)")
    ts: datetime = Field(description="Event timestamp (ISO8601 UTC)")
    event_type: LedgerEventType = Field(description="Event type")
    artifact: str | None = Field(default=None, description="Related artifact filename if applicable")
    payload: dict = Field(default_factory=dict, description="Event-specific data")

    model_config = {"frozen": True}


class LedgerTail(BaseModel):
    """The most recent ledger events, plus how many lines could not be parsed."""

    events: list[LedgerEvent] = Field(default_factory=list)
    malformed: int = Field(default=0, description="Malformed lines skipped within the tail")
