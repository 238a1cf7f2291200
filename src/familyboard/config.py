"""Configuration management for Family Board."""

import os
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_LFS_PATTERNS = ["*.webm", "*.mp4", "*.jpg", "*.jpeg", "*.png", "*.gif"]


def _default_home() -> Path:
    return Path.home() / "Desktop" / "FamilyHomepage"


def _config_file_path() -> Path:
    """Location of the user config file (FAMILYBOARD_CONFIG overrides it)."""
    override = os.environ.get("FAMILYBOARD_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "familyboard" / "config.toml"


def _load_config_file_data(config_file: Optional[Path] = None) -> Optional[dict]:
    """Load the user config file if it exists."""
    config_file = config_file or _config_file_path()

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return float(value)


def resolve_board_home(cli_home: Optional[str] = None, file_data: Optional[dict] = None) -> Path:
    """Resolve the board home directory with the following precedence:

    1. CLI --home option (if provided)
    2. FAMILYBOARD_HOME environment variable
    3. home_path in the user config file
    4. ~/Desktop/FamilyHomepage

    The directory does not have to exist yet; bootstrap creates it.

    Args:
        cli_home: Home path from CLI --home option
        file_data: Already-parsed config file data (loaded if None)

    Returns:
        Absolute path to the board home
    """
    if cli_home:
        return Path(cli_home).expanduser().resolve()

    env_home = os.environ.get("FAMILYBOARD_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()

    if file_data is None:
        file_data = _load_config_file_data()
    if file_data and isinstance(file_data.get("home_path"), str):
        return Path(file_data["home_path"]).expanduser().resolve()

    return _default_home()


class BoardConfig(BaseModel):
    """Configuration for a Family Board installation."""

    home_path: Path = Field(default_factory=_default_home)
    poll_interval_seconds: float = Field(default=60.0, gt=0)
    remote_name: str = Field(default="origin")
    remote_branches: list[str] = Field(default_factory=lambda: ["main", "master"])
    lfs_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_LFS_PATTERNS))
    git_binary: str = Field(default="git")
    git_timeout_seconds: Optional[float] = Field(default=None)
    device_name: Optional[str] = Field(default=None)
    auto_push: bool = Field(default=False)

    model_config = {"frozen": False}

    @classmethod
    def from_env(cls, cli_home: Optional[str] = None) -> "BoardConfig":
        """Load configuration from environment variables, the config file, or defaults.

        Environment variables win over the config file.

        Args:
            cli_home: Home path from CLI --home option (highest precedence)
        """
        file_data = _load_config_file_data() or {}
        home_path = resolve_board_home(cli_home, file_data)

        values: dict = {"home_path": home_path}
        for key in (
            "poll_interval_seconds",
            "remote_name",
            "remote_branches",
            "lfs_patterns",
            "git_binary",
            "git_timeout_seconds",
            "device_name",
            "auto_push",
        ):
            if key in file_data:
                values[key] = file_data[key]

        poll_interval = _env_float("FAMILYBOARD_POLL_INTERVAL")
        if poll_interval is not None:
            values["poll_interval_seconds"] = poll_interval

        git_timeout = _env_float("FAMILYBOARD_GIT_TIMEOUT")
        if git_timeout is not None:
            values["git_timeout_seconds"] = git_timeout

        if os.environ.get("FAMILYBOARD_REMOTE"):
            values["remote_name"] = os.environ["FAMILYBOARD_REMOTE"]
        if os.environ.get("FAMILYBOARD_DEVICE_NAME"):
            values["device_name"] = os.environ["FAMILYBOARD_DEVICE_NAME"]

        values["auto_push"] = _env_bool("FAMILYBOARD_AUTO_PUSH", bool(values.get("auto_push", False)))

        return cls(**values)
