"""Boundary between the board front end and the store/poller."""

import base64
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .models.artifact import ArtifactKind, ListResult, MediaSaveResult, SaveResult, is_recognized, kind_for_filename
from .store import ArtifactStore
from .sync import Listener, SyncPoller

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = {
    ArtifactKind.IMAGE: "jpg",
    ArtifactKind.AUDIO: "webm",
    ArtifactKind.VIDEO: "webm",
}


def filename_timestamp(now: Optional[datetime] = None) -> str:
    """Filename-safe UTC timestamp, e.g. 2026-10-19T08-15-30-123Z."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def note_filename(now: Optional[datetime] = None) -> str:
    return f"note-{filename_timestamp(now)}.md"


def media_filename(
    device: str,
    kind: ArtifactKind,
    extension: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Compose <device>-<kind>-<timestamp>.<ext> for a media artifact."""
    ext = (extension or DEFAULT_EXTENSIONS[kind]).lstrip(".").lower()
    return f"{device}-{kind.value}-{filename_timestamp(now)}.{ext}"


class BoardBridge:
    """What the front end is allowed to do with the board.

    Save failures come back as results for the caller to show; the poller
    pushes "new artifacts" notifications through subscribe().
    """

    def __init__(self, store: ArtifactStore, device_name: str, poller: Optional[SyncPoller] = None):
        self.store = store
        self._device_name = device_name
        self.poller = poller

    @property
    def device_name(self) -> str:
        return self._device_name

    def save_note(self, filename: str, content: str) -> SaveResult:
        return self.store.write_note(filename, content)

    def save_media(self, filename: str, data_payload: str) -> MediaSaveResult:
        return self.store.write_media(filename, data_payload)

    def load_artifacts(self) -> ListResult:
        result = self.store.list_artifacts()
        if not result.success:
            logger.warning(f"Listing artifacts failed: {result.error}")
        return result

    def subscribe(self, callback: Listener) -> None:
        """Register for the poller's "new artifacts available" notification."""
        if self.poller is None:
            raise RuntimeError("No sync poller attached to this bridge")
        self.poller.subscribe(callback)

    def send_text(self, text: str, now: Optional[datetime] = None) -> Optional[SaveResult]:
        """Post a text message; blank text is ignored and returns None."""
        text = text.strip()
        if not text:
            return None
        return self.save_note(note_filename(now), text)

    def send_media_file(
        self,
        source: Path,
        kind: Optional[ArtifactKind] = None,
        now: Optional[datetime] = None,
    ) -> MediaSaveResult:
        """Post a media file from disk under a device-namespaced filename.

        Args:
            source: File to post
            kind: Artifact kind; inferred from the extension when None
            now: Timestamp for the filename (defaults to the current time)
        """
        extension = source.suffix.lstrip(".")
        inferred = kind_for_filename(source.name)
        if (extension and not is_recognized(source.name)) or inferred is ArtifactKind.NOTE:
            return MediaSaveResult(success=False, error=f"Unsupported media file: {source.name}")
        kind = kind or inferred
        if kind is None or kind is ArtifactKind.NOTE:
            return MediaSaveResult(success=False, error=f"Cannot infer media kind for {source.name}")

        try:
            payload = base64.b64encode(source.read_bytes()).decode("ascii")
        except OSError as e:
            return MediaSaveResult(success=False, error=str(e))

        filename = media_filename(self._device_name, kind, extension or None, now)
        return self.save_media(filename, payload)
