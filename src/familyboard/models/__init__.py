"""Pydantic models for Family Board."""

from .artifact import (
    Artifact,
    ArtifactKind,
    ListResult,
    MediaSaveResult,
    RECOGNIZED_EXTENSIONS,
    SaveResult,
    is_recognized,
    kind_for_filename,
)
from .ledger import LedgerEvent, LedgerTail
from .sync import SyncCycleResult, SyncOutcome

__all__ = [
    "Artifact",
    "ArtifactKind",
    "RECOGNIZED_EXTENSIONS",
    "is_recognized",
    "kind_for_filename",
    "SaveResult",
    "MediaSaveResult",
    "ListResult",
    "LedgerEvent",
    "LedgerTail",
    # Sync
    "SyncOutcome",
    "SyncCycleResult",
]
