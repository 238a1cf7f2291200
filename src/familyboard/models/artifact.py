"""Pydantic models for board artifacts and gateway results."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ArtifactKind(str, Enum):
    """Kinds of artifacts a family member can post."""

    NOTE = "note"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


NOTE_EXTENSIONS = {".md"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
RECORDING_EXTENSIONS = {".webm", ".mp4"}
RECOGNIZED_EXTENSIONS = NOTE_EXTENSIONS | IMAGE_EXTENSIONS | RECORDING_EXTENSIONS


def is_recognized(filename: str) -> bool:
    """Check whether a filename has one of the recognized artifact extensions."""
    return Path(filename).suffix.lower() in RECOGNIZED_EXTENSIONS


def kind_for_filename(filename: str) -> ArtifactKind | None:
    """Derive the artifact kind from a filename.

    Explicit markers in the name ("image", "video", "audio") win over the
    extension, so a .webm recording named "<device>-video-<ts>.webm" is a
    video while a bare .webm is treated as audio.

    Args:
        filename: Artifact filename

    Returns:
        ArtifactKind, or None if the filename is not a recognized artifact
    """
    ext = Path(filename).suffix.lower()
    if ext not in RECOGNIZED_EXTENSIONS:
        return None

    name = filename.lower()
    if ext in NOTE_EXTENSIONS:
        return ArtifactKind.NOTE
    if "image" in name or ext in IMAGE_EXTENSIONS:
        return ArtifactKind.IMAGE
    if "video" in name:
        return ArtifactKind.VIDEO
    if "audio" in name or ext == ".webm":
        return ArtifactKind.AUDIO
    return ArtifactKind.VIDEO


class Artifact(BaseModel):
    """A single user-contributed item in the artifact store.

    Only notes carry their content; media artifacts are metadata plus a path.
    """

    filename: str = Field(description="Filename, unique within the store")
    name: str = Field(description="Filename without its extension")
    kind: ArtifactKind = Field(description="Artifact kind derived from the filename")
    updated: datetime = Field(description="Modification time (UTC)")
    size_bytes: int = Field(description="File size in bytes")
    path: Path = Field(description="Absolute path to the artifact file")
    content: str | None = Field(default=None, description="Note text (notes only)")


class SaveResult(BaseModel):
    """Outcome of saving a text note."""

    success: bool
    error: str | None = None


class MediaSaveResult(BaseModel):
    """Outcome of saving a media file."""

    success: bool
    path: Path | None = None
    error: str | None = None


class ListResult(BaseModel):
    """Outcome of listing the artifact store."""

    success: bool
    artifacts: list[Artifact] = Field(default_factory=list)
    error: str | None = None
