"""Persistence gateway for the artifact store.

Writes artifacts into the store directory, records them in version-control
history, and enumerates what is currently on the board. Nothing here raises
across the gateway boundary: every operation returns a result model.
"""

import base64
import binascii
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from .history import HistoryBackend, HistoryCommandError
from .ledger import LedgerWriter
from .models.artifact import (
    Artifact,
    ArtifactKind,
    ListResult,
    MediaSaveResult,
    SaveResult,
    kind_for_filename,
)

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


class InvalidFilenameError(ValueError):
    """Raised when an artifact filename is not a legal plain filename."""


def validate_filename(filename: str) -> str:
    """Check that a filename names a plain file directly inside the store.

    Args:
        filename: Candidate artifact filename

    Returns:
        The filename unchanged

    Raises:
        InvalidFilenameError: If the name is empty, a dot entry, or contains
            path separators or NUL bytes
    """
    if not filename or filename in (".", ".."):
        raise InvalidFilenameError(f"Invalid artifact filename: {filename!r}")
    if "/" in filename or "\\" in filename or "\x00" in filename:
        raise InvalidFilenameError(f"Artifact filename must not contain path separators: {filename!r}")
    return filename


def decode_payload(payload: str) -> bytes:
    """Decode a base64 payload, stripping a leading data URL header if present.

    Line breaks and other whitespace inside the data are ignored, so
    MIME-style wrapped base64 decodes the same as a single line.

    Raises:
        ValueError: If the payload is not valid base64
    """
    data = _WHITESPACE.sub("", _DATA_URL_PREFIX.sub("", payload.strip(), count=1))
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def commit_message(filename: str) -> str:
    return f"Add {filename}"


class ArtifactStore:
    """Gateway to the artifact store directory and its history."""

    def __init__(
        self,
        root: Path,
        backend: HistoryBackend,
        ledger_writer: Optional[LedgerWriter] = None,
        lfs_patterns: Iterable[str] = (),
        auto_push: bool = False,
    ):
        """Initialize the store gateway.

        Args:
            root: Store directory (also the version-control working copy)
            backend: History backend bound to the same directory
            ledger_writer: Optional ledger for audit events
            lfs_patterns: Patterns tracked as large files on bootstrap
            auto_push: Push to the remote after each successful commit
        """
        self.root = root
        self.backend = backend
        self.ledger_writer = ledger_writer
        self.lfs_patterns = list(lfs_patterns)
        self.auto_push = auto_push

    def _record(self, event_type, payload: dict, artifact: str | None = None) -> None:
        if self.ledger_writer is not None:
            self.ledger_writer.append_event(event_type=event_type, payload=payload, artifact=artifact)

    def ensure_initialized(self) -> bool:
        """Create and initialize the store on first-ever startup.

        Does nothing if the directory already exists, whatever its contents.
        Repository initialization errors are logged; the directory is kept.

        Returns:
            True if this call created the store
        """
        if self.root.exists():
            return False

        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created artifact store at {self.root}")

        error = None
        try:
            self.backend.init_repository(self.lfs_patterns)
        except HistoryCommandError as e:
            error = str(e)
            logger.error(f"History initialization failed for {self.root}: {e}")

        self._record(
            "STORE_INITIALIZED",
            payload={
                "root": str(self.root),
                "lfs_patterns": self.lfs_patterns,
                "history_initialized": error is None,
                "error": error,
            },
        )
        return True

    def _write_new_file(self, filename: str, data: bytes) -> Path:
        """Write bytes to a new file in the store; never overwrites."""
        path = (self.root / validate_filename(filename)).absolute()
        with open(path, "xb") as f:
            f.write(data)
        return path

    def _commit(self, filename: str, path: Path) -> Optional[str]:
        """Commit a freshly written artifact; return an error message on failure.

        The file is left on disk when the commit fails.
        """
        try:
            self.backend.stage_and_commit(filename, commit_message(filename))
        except HistoryCommandError as e:
            logger.error(f"Commit failed for {filename}, file kept at {path}: {e}")
            self._record("ARTIFACT_COMMIT_FAILED", payload={"path": str(path), "error": str(e)}, artifact=filename)
            return str(e)

        self._record("ARTIFACT_SAVED", payload={"path": str(path), "size_bytes": path.stat().st_size}, artifact=filename)

        if self.auto_push:
            try:
                self.backend.push()
            except HistoryCommandError as e:
                logger.warning(f"Push after committing {filename} failed: {e}")
                self._record("ARTIFACT_PUSH_FAILED", payload={"error": str(e)}, artifact=filename)

        return None

    def write_note(self, filename: str, text_content: str) -> SaveResult:
        """Write a text note verbatim and commit it.

        Args:
            filename: Note filename (e.g. note-<timestamp>.md)
            text_content: Note text, written as UTF-8

        Returns:
            SaveResult carrying the I/O or history error on failure
        """
        try:
            path = self._write_new_file(filename, text_content.encode("utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write note {filename}: {e}")
            return SaveResult(success=False, error=str(e))

        error = self._commit(filename, path)
        if error:
            return SaveResult(success=False, error=error)
        return SaveResult(success=True)

    def write_media(self, filename: str, base64_payload: str) -> MediaSaveResult:
        """Decode a base64 (or data URL) payload, write it and commit it.

        Args:
            filename: Media filename (e.g. <device>-audio-<timestamp>.webm)
            base64_payload: Base64 data, optionally prefixed by a data URL header

        Returns:
            MediaSaveResult with the absolute file path on success
        """
        try:
            data = decode_payload(base64_payload)
            path = self._write_new_file(filename, data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write media {filename}: {e}")
            return MediaSaveResult(success=False, error=str(e))

        error = self._commit(filename, path)
        if error:
            return MediaSaveResult(success=False, error=error)
        return MediaSaveResult(success=True, path=path)

    def list_artifacts(self) -> ListResult:
        """Enumerate artifacts, oldest first.

        Hidden entries and unrecognized extensions are skipped. Only notes
        have their content read; media is never loaded into memory.
        """
        try:
            entries = list(self.root.iterdir())
        except OSError as e:
            logger.error(f"Failed to read artifact store {self.root}: {e}")
            return ListResult(success=False, error=str(e))

        artifacts: list[Artifact] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            kind = kind_for_filename(entry.name)
            if kind is None:
                continue

            try:
                if not entry.is_file():
                    continue
                stats = entry.stat()
            except OSError as e:
                # Removed by a concurrent pull between iterdir() and stat()
                logger.debug(f"Skipping {entry.name}: {e}")
                continue

            content = None
            if kind is ArtifactKind.NOTE:
                try:
                    content = entry.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning(f"Could not read note {entry.name}: {e}")
                    content = ""

            artifacts.append(
                Artifact(
                    filename=entry.name,
                    name=entry.stem,
                    kind=kind,
                    updated=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
                    size_bytes=stats.st_size,
                    path=entry.absolute(),
                    content=content,
                )
            )

        artifacts.sort(key=lambda a: (a.updated, a.filename))
        return ListResult(success=True, artifacts=artifacts)
