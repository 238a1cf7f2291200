"""Background sync poller: detect remote history, pull it, notify listeners."""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from .history import HistoryBackend, HistoryCommandError
from .ledger import LedgerWriter
from .models.sync import SyncCycleResult, SyncOutcome

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class HistoryPointer:
    """Most recently known local history tip.

    Written by the poller thread only; the lock makes reads from other
    threads see a complete value. An empty value never replaces a known tip.
    """

    def __init__(self, value: str = ""):
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> str:
        with self._lock:
            return self._value

    def advance(self, new_value: str) -> bool:
        """Replace the pointer with a newer tip.

        Returns:
            True if the stored value changed
        """
        if not new_value:
            return False
        with self._lock:
            if new_value == self._value:
                return False
            self._value = new_value
            return True


class SyncPoller:
    """Periodically fetch the remote and pull in new artifacts.

    Fetch and pull are best effort: the remote may not exist yet or may be
    unreachable, so their failures are logged and never raised. Listeners
    only ever hear about new artifacts, never about errors.
    """

    def __init__(
        self,
        backend: HistoryBackend,
        remote_branches: Iterable[str] = ("main", "master"),
        interval_seconds: float = 60.0,
        pointer: Optional[HistoryPointer] = None,
        ledger_writer: Optional[LedgerWriter] = None,
        attention: Optional[Listener] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        """Initialize the poller.

        Args:
            backend: History backend bound to the artifact store
            remote_branches: Remote branch names to try, in order
            interval_seconds: Delay between cycles
            pointer: Shared history pointer (a fresh one if None)
            ledger_writer: Optional ledger for pull events
            attention: Called before listeners when new artifacts arrive,
                so the front end can bring itself forward
            wait: Sleep function returning True when the poller should stop;
                defaults to waiting on the internal stop event
        """
        self.backend = backend
        self.remote_branches = list(remote_branches)
        self.interval_seconds = interval_seconds
        self.pointer = pointer or HistoryPointer()
        self.ledger_writer = ledger_writer
        self.attention = attention
        self._listeners: list[Listener] = []
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._thread: Optional[threading.Thread] = None

    def subscribe(self, listener: Listener) -> None:
        """Register a callback for the "new artifacts available" signal."""
        self._listeners.append(listener)

    def initialize(self) -> str:
        """Seed the pointer from the local history tip."""
        tip = self.backend.local_tip()
        self.pointer.advance(tip)
        if not tip:
            logger.info("No local history yet")
        return self.pointer.value

    def _notify(self) -> None:
        if self.attention is not None:
            try:
                self.attention()
            except Exception as e:
                logger.warning(f"Attention hook failed: {e}")

        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"New-artifacts listener {listener!r} failed: {e}")

    def run_cycle(self) -> SyncCycleResult:
        """Run one Check -> Compare -> Pull -> Notify pass."""
        checked_at = datetime.now(timezone.utc)
        pointer_before = self.pointer.value

        fetch_ok = True
        try:
            self.backend.fetch()
        except (HistoryCommandError, OSError) as e:
            # Expected when no remote is configured yet
            fetch_ok = False
            logger.info(f"Fetch failed (expected if no remote): {e}")

        remote_branch, remote_tip = self.backend.remote_tip(self.remote_branches)

        if not remote_tip or remote_tip == pointer_before:
            return SyncCycleResult(
                outcome=SyncOutcome.NO_CHANGE,
                checked_at=checked_at,
                fetch_ok=fetch_ok,
                remote_tip=remote_tip,
                remote_branch=remote_branch,
                pointer_before=pointer_before,
                pointer_after=pointer_before,
            )

        logger.info(f"New commits detected ({remote_tip[:8]}), pulling")
        try:
            self.backend.pull_rebase(remote_branch)
        except (HistoryCommandError, OSError) as e:
            logger.warning(f"Pull failed, will retry next cycle: {e}")
            if self.ledger_writer is not None:
                self.ledger_writer.append_event(
                    event_type="SYNC_PULL_FAILED",
                    payload={
                        "remote_branch": remote_branch,
                        "remote_tip": remote_tip,
                        "pointer": pointer_before,
                        "error": str(e),
                    },
                )
            return SyncCycleResult(
                outcome=SyncOutcome.PULL_FAILED,
                checked_at=checked_at,
                fetch_ok=fetch_ok,
                remote_tip=remote_tip,
                remote_branch=remote_branch,
                pointer_before=pointer_before,
                pointer_after=pointer_before,
                error=str(e),
            )

        self.pointer.advance(self.backend.local_tip())
        pointer_after = self.pointer.value

        if self.ledger_writer is not None:
            self.ledger_writer.append_event(
                event_type="SYNC_PULLED",
                payload={
                    "remote_branch": remote_branch,
                    "remote_tip": remote_tip,
                    "pointer_before": pointer_before,
                    "pointer_after": pointer_after,
                },
            )

        self._notify()

        return SyncCycleResult(
            outcome=SyncOutcome.PULLED,
            checked_at=checked_at,
            fetch_ok=fetch_ok,
            remote_tip=remote_tip,
            remote_branch=remote_branch,
            pointer_before=pointer_before,
            pointer_after=pointer_after,
        )

    def _loop(self) -> None:
        self.initialize()
        while not self._wait(self.interval_seconds):
            if self._stop_event.is_set():
                break
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Unexpected error in sync cycle")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling on a daemon thread. Calling it twice is a no-op."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="familyboard-sync", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to stop and wait for the thread to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
