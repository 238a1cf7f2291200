"""Tests for the presentation bridge."""

import base64
import os
from datetime import datetime, timedelta, timezone

import pytest

from familyboard.bridge import BoardBridge, filename_timestamp, media_filename, note_filename
from familyboard.models.artifact import ArtifactKind
from familyboard.store import ArtifactStore
from familyboard.sync import SyncPoller

from fakes import FakeHistoryBackend

T = datetime(2026, 10, 19, 8, 15, 30, 123456, tzinfo=timezone.utc)


@pytest.fixture
def bridge(store):
    return BoardBridge(store, "family-mac")


def test_filename_timestamp_is_filename_safe():
    assert filename_timestamp(T) == "2026-10-19T08-15-30-123Z"


def test_filename_timestamp_converts_to_utc():
    local = T.astimezone(timezone(timedelta(hours=2)))
    assert filename_timestamp(local) == "2026-10-19T08-15-30-123Z"


def test_note_and_media_filenames():
    assert note_filename(T) == "note-2026-10-19T08-15-30-123Z.md"
    assert media_filename("family-mac", ArtifactKind.AUDIO, now=T) == "family-mac-audio-2026-10-19T08-15-30-123Z.webm"
    assert media_filename("family-mac", ArtifactKind.IMAGE, ".PNG", now=T) == "family-mac-image-2026-10-19T08-15-30-123Z.png"
    assert media_filename("family-mac", ArtifactKind.IMAGE, now=T).endswith(".jpg")


def test_device_name_readout(bridge):
    assert bridge.device_name == "family-mac"


def test_note_then_image_scenario(bridge, board_paths):
    """Empty store, note "Hello" then a 2048-byte image: [note, image]."""
    note = bridge.send_text("Hello", now=T)
    assert note.success

    note_path = board_paths.notes / note_filename(T)
    os.utime(note_path, (1_000, 1_000))

    image_bytes = os.urandom(2048)
    image_name = media_filename(bridge.device_name, ArtifactKind.IMAGE, "png", now=T)
    image = bridge.save_media(image_name, "data:image/png;base64," + base64.b64encode(image_bytes).decode("ascii"))
    assert image.success
    os.utime(image.path, (2_000, 2_000))

    listing = bridge.load_artifacts()
    assert listing.success
    assert [a.kind for a in listing.artifacts] == [ArtifactKind.NOTE, ArtifactKind.IMAGE]

    first, second = listing.artifacts
    assert first.filename == "note-2026-10-19T08-15-30-123Z.md"
    assert first.content == "Hello"
    assert second.filename == "family-mac-image-2026-10-19T08-15-30-123Z.png"
    assert second.size_bytes == 2048
    assert second.content is None


def test_send_text_trims_and_ignores_blank(bridge, fake_backend):
    assert bridge.send_text("   \n\t ") is None
    assert fake_backend.commits == []

    result = bridge.send_text("  hi there \n", now=T)
    assert result.success
    assert bridge.load_artifacts().artifacts[0].content == "hi there"


def test_send_media_file_infers_kind_from_extension(bridge, tmp_path):
    source = tmp_path / "holiday.JPG"
    source.write_bytes(b"\xff\xd8\xff" + b"\x00" * 10)

    result = bridge.send_media_file(source, now=T)

    assert result.success
    assert result.path.name == "family-mac-image-2026-10-19T08-15-30-123Z.jpg"
    assert result.path.read_bytes() == source.read_bytes()


def test_send_media_file_with_explicit_kind(bridge, tmp_path):
    source = tmp_path / "clip.webm"
    source.write_bytes(b"webm")

    result = bridge.send_media_file(source, kind=ArtifactKind.VIDEO, now=T)

    assert result.success
    assert result.path.name == "family-mac-video-2026-10-19T08-15-30-123Z.webm"
    assert bridge.load_artifacts().artifacts[0].kind is ArtifactKind.VIDEO


@pytest.mark.parametrize("name", ["document.pdf", "notes.md"])
def test_send_media_file_rejects_unsupported_files(bridge, tmp_path, name, fake_backend):
    source = tmp_path / name
    source.write_bytes(b"data")

    result = bridge.send_media_file(source, now=T)

    assert not result.success
    assert "Unsupported" in result.error
    assert fake_backend.commits == []


def test_send_media_file_missing_source(bridge, tmp_path):
    result = bridge.send_media_file(tmp_path / "gone.png", now=T)

    assert not result.success
    assert result.error


def test_save_failure_is_returned_not_raised(bridge, fake_backend):
    fake_backend.fail_commit = True

    result = bridge.save_note("note-fail.md", "x")

    assert not result.success
    assert result.error


def test_load_artifacts_failure_is_absorbed(tmp_path, fake_backend):
    bridge = BoardBridge(ArtifactStore(tmp_path / "missing", fake_backend), "dev")

    result = bridge.load_artifacts()

    assert not result.success
    assert result.artifacts == []


def test_subscribe_receives_poller_notifications(store):
    backend = FakeHistoryBackend(local="abc123", remote="def456")
    poller = SyncPoller(backend)
    poller.initialize()
    bridge = BoardBridge(store, "family-mac", poller=poller)
    received = []

    bridge.subscribe(lambda: received.append(bridge.load_artifacts()))
    poller.run_cycle()

    assert len(received) == 1
    assert received[0].success


def test_subscribe_without_poller_raises(bridge):
    with pytest.raises(RuntimeError):
        bridge.subscribe(lambda: None)
