"""Append-only ledger writer for Family Board."""

import json
import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .models.ledger import LedgerEvent, LedgerEventType, LedgerTail

logger = logging.getLogger(__name__)


class LedgerWriter:
    """Append-only ledger writer.

    Writes events to <home>/.board/ledger.jsonl.
    Never truncates or rewrites; only appends.
    """

    def __init__(self, ledger_path: Path, run_id: str | None = None):
        """Initialize ledger writer.

        Args:
            ledger_path: Path to ledger.jsonl file
            run_id: Optional run ID; if None, generates a new uuid4
        """
        self.ledger_path = ledger_path
        self.run_id = run_id or str(uuid.uuid4())

    def append_event(
        self,
        event_type: LedgerEventType,
        payload: dict,
        artifact: str | None = None,
    ) -> LedgerEvent:
        """Append an event to the ledger.

        Args:
            event_type: Type of event
            payload: Event-specific data
            artifact: Optional artifact filename reference

        Returns:
            The created LedgerEvent
        """
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)

        event = LedgerEvent(
            event_id=str(uuid.uuid4()),
            run_id=self.run_id,
            ts=datetime.now(timezone.utc),
            event_type=event_type,
            artifact=artifact,
            payload=payload,
        )

        # JSONL: one JSON object per line
        with open(self.ledger_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event.model_dump(mode="json")) + "\n")

        return event


def read_ledger_tail(ledger_path: Path, n: int = 20) -> LedgerTail:
    """Parse the last N lines of the ledger.

    Only the tail is held in memory. Lines that are not valid events are
    counted in `malformed` instead of failing the read.
    """
    if n <= 0 or not ledger_path.exists():
        return LedgerTail()

    with open(ledger_path, "r", encoding="utf-8") as f:
        lines = deque((line for line in f if line.strip()), maxlen=n)

    tail = LedgerTail()
    for line in lines:
        try:
            tail.events.append(LedgerEvent.model_validate_json(line))
        except ValidationError as e:
            tail.malformed += 1
            logger.debug(f"Unparseable ledger line in {ledger_path}: {e}")

    if tail.malformed:
        logger.warning(f"Skipped {tail.malformed} malformed line(s) in {ledger_path}")
    return tail
