"""Tests for artifact kind detection."""

import pytest

from familyboard.models.artifact import ArtifactKind, is_recognized, kind_for_filename


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("note-2026-10-19T08-15-30-123Z.md", ArtifactKind.NOTE),
        ("family-mac-image-2026.png", ArtifactKind.IMAGE),
        ("holiday.JPEG", ArtifactKind.IMAGE),
        ("cat.gif", ArtifactKind.IMAGE),
        ("family-mac-video-2026.webm", ArtifactKind.VIDEO),
        ("family-mac-audio-2026.webm", ArtifactKind.AUDIO),
        ("recording.webm", ArtifactKind.AUDIO),
        ("clip.mp4", ArtifactKind.VIDEO),
    ],
)
def test_kind_for_filename(filename, expected):
    assert kind_for_filename(filename) is expected


@pytest.mark.parametrize("filename", ["readme.txt", "archive.zip", "noextension", "photo.heic"])
def test_unrecognized_files_have_no_kind(filename):
    assert kind_for_filename(filename) is None
    assert not is_recognized(filename)
