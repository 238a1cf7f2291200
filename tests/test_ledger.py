"""Tests for ledger functionality."""

import json

from familyboard.ledger import LedgerWriter, read_ledger_tail


def test_ledger_append_creates_file(temp_home):
    """Appending to the ledger creates the file and its directory."""
    ledger_path = temp_home / ".board" / "ledger.jsonl"
    assert not ledger_path.exists()

    writer = LedgerWriter(ledger_path)
    event = writer.append_event(
        event_type="ARTIFACT_SAVED",
        payload={"size_bytes": 5},
        artifact="note-a.md",
    )

    assert ledger_path.exists()
    assert event.event_id
    assert event.run_id == writer.run_id
    assert event.event_type == "ARTIFACT_SAVED"
    assert event.artifact == "note-a.md"


def test_ledger_appends_one_json_object_per_line(board_paths):
    writer = LedgerWriter(board_paths.ledger_file, run_id="run-1")
    for i in range(3):
        writer.append_event(event_type="SYNC_PULLED", payload={"index": i})

    lines = board_paths.ledger_file.read_text().strip().split("\n")

    assert len(lines) == 3
    assert [json.loads(line)["payload"]["index"] for line in lines] == [0, 1, 2]
    assert {json.loads(line)["run_id"] for line in lines} == {"run-1"}


def test_read_ledger_tail_returns_last_n(board_paths):
    writer = LedgerWriter(board_paths.ledger_file)
    for i in range(5):
        writer.append_event(event_type="ARTIFACT_SAVED", payload={"index": i})

    tail = read_ledger_tail(board_paths.ledger_file, n=2)

    assert [e.payload["index"] for e in tail.events] == [3, 4]
    assert tail.malformed == 0


def test_read_ledger_tail_skips_malformed_lines(board_paths):
    writer = LedgerWriter(board_paths.ledger_file)
    writer.append_event(event_type="ARTIFACT_SAVED", payload={})
    with open(board_paths.ledger_file, "a", encoding="utf-8") as f:
        f.write("{not json\n")
        f.write('{"event_type": "UNKNOWN"}\n')
    writer.append_event(event_type="SYNC_PULLED", payload={})

    tail = read_ledger_tail(board_paths.ledger_file)

    assert [e.event_type for e in tail.events] == ["ARTIFACT_SAVED", "SYNC_PULLED"]
    assert tail.malformed == 2


def test_read_ledger_tail_missing_file(temp_home):
    tail = read_ledger_tail(temp_home / "nope.jsonl")

    assert tail.events == []
    assert tail.malformed == 0


def test_read_ledger_tail_counts_only_malformed_lines_in_window(board_paths):
    board_paths.ledger_file.parent.mkdir(parents=True, exist_ok=True)
    board_paths.ledger_file.write_text("garbage\n")
    writer = LedgerWriter(board_paths.ledger_file)
    for _ in range(3):
        writer.append_event(event_type="SYNC_PULLED", payload={})

    tail = read_ledger_tail(board_paths.ledger_file, n=3)

    assert len(tail.events) == 3
    assert tail.malformed == 0
