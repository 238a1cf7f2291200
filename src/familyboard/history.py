"""Version-control history backend for the artifact store.

The store only needs a handful of history operations, so they are kept
behind a narrow protocol. GitHistoryBackend implements it by running the
git binary, one child process per invocation, inside the working copy.
"""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit with LFS"


class HistoryCommandError(RuntimeError):
    """Raised when a version-control command fails."""

    def __init__(self, command: list[str], returncode: Optional[int], stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"Command failed: {' '.join(command)}: {detail}")


class HistoryBackend(Protocol):
    """Operations the store and the sync poller need from version control."""

    def init_repository(self, lfs_patterns: Iterable[str]) -> None: ...

    def stage_and_commit(self, filename: str, message: str) -> None: ...

    def fetch(self) -> None: ...

    def remote_tip(self, branches: Iterable[str]) -> tuple[str, str]: ...

    def pull_rebase(self, branch: str) -> None: ...

    def local_tip(self) -> str: ...

    def push(self) -> None: ...


def lfs_attributes(patterns: Iterable[str]) -> str:
    """Render .gitattributes rules that route patterns through git-lfs."""
    return "".join(f"{pattern} filter=lfs diff=lfs merge=lfs -text\n" for pattern in patterns)


class GitHistoryBackend:
    """HistoryBackend that shells out to git."""

    def __init__(
        self,
        work_tree: Path,
        git_binary: str = "git",
        remote: str = "origin",
        default_branch: str = "main",
        timeout: Optional[float] = None,
    ):
        """Initialize the git backend.

        Args:
            work_tree: Working copy directory (the artifact store)
            git_binary: git executable to run
            remote: Remote name to fetch from and push to
            default_branch: Branch HEAD points at in a fresh repository
            timeout: Per-command timeout in seconds; None waits indefinitely
        """
        self.work_tree = work_tree
        self.git_binary = git_binary
        self.remote = remote
        self.default_branch = default_branch
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        """Run one git command in the working copy and return its stdout."""
        command = [self.git_binary, *args]
        logger.debug(f"Running {' '.join(command)} in {self.work_tree}")

        try:
            completed = subprocess.run(
                command,
                cwd=self.work_tree,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise HistoryCommandError(command, None, f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise HistoryCommandError(command, None, str(e)) from e

        if completed.returncode != 0:
            raise HistoryCommandError(command, completed.returncode, completed.stderr or "")
        return completed.stdout

    def init_repository(self, lfs_patterns: Iterable[str]) -> None:
        """Create a repository with LFS rules and an initial empty commit."""
        self._run("init")
        self._run("symbolic-ref", "HEAD", f"refs/heads/{self.default_branch}")

        attributes_file = self.work_tree / ".gitattributes"
        attributes_file.write_text(lfs_attributes(lfs_patterns), encoding="utf-8")

        try:
            self._run("lfs", "install", "--local")
        except HistoryCommandError as e:
            # Attributes still apply once git-lfs is installed on this machine
            logger.warning(f"git-lfs unavailable, large files will be stored in git: {e}")

        self._run("add", ".gitattributes")
        self._run("commit", "--allow-empty", "-m", INITIAL_COMMIT_MESSAGE)

    def stage_and_commit(self, filename: str, message: str) -> None:
        self._run("add", "--", filename)
        self._run("commit", "-m", message, "--", filename)

    def fetch(self) -> None:
        self._run("fetch", self.remote)

    def remote_tip(self, branches: Iterable[str]) -> tuple[str, str]:
        """Find the first remote branch that resolves.

        Returns:
            (branch, commit) for that branch, or ("", "") if none resolve
        """
        for branch in branches:
            try:
                tip = self._run("rev-parse", "--verify", "--quiet", f"{self.remote}/{branch}").strip()
            except HistoryCommandError:
                logger.debug(f"No remote branch {self.remote}/{branch}")
                continue
            return branch, tip
        return "", ""

    def pull_rebase(self, branch: str) -> None:
        """Rebase local history onto <remote>/<branch>."""
        self._run("pull", "--rebase", self.remote, branch)

    def local_tip(self) -> str:
        """Return the local HEAD commit, or "" without a repository or commits."""
        try:
            return self._run("rev-parse", "--verify", "--quiet", "HEAD").strip()
        except HistoryCommandError:
            return ""

    def push(self) -> None:
        self._run("push", "--set-upstream", self.remote, "HEAD")
