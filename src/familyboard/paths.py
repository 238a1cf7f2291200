"""Path management for the Family Board home directory."""

from pathlib import Path

from .config import BoardConfig


class BoardPaths:
    """Manages paths within a Family Board home."""

    def __init__(self, home: Path):
        """Initialize board paths from the home directory.

        Args:
            home: Board home directory
        """
        self.root = home

        # Artifact store: the git working copy that gets synced
        self.notes = home / "notes"

        # Local-only state, never committed
        self.system = home / ".board"
        self.ledger_file = self.system / "ledger.jsonl"

    @classmethod
    def from_config(cls, config: BoardConfig) -> "BoardPaths":
        """Create BoardPaths from a BoardConfig."""
        return cls(config.home_path)

    def artifact_path(self, filename: str) -> Path:
        """Get the absolute path an artifact would have inside the store."""
        return (self.notes / filename).absolute()
