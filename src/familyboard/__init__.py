"""Family Board - a git-synced household message board."""

__version__ = "0.1.0"
