"""
Catalog sync progress register.

Holds the progress of the current (or most recent) catalog sync in process
memory. One register is created per application and passed to whoever needs
it; nothing here is persisted, so a restart forgets the last run.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel

SyncState = Literal["idle", "running", "completed", "error"]


class SyncStatus(BaseModel):
    """Snapshot of a catalog sync run."""

    status: SyncState = "idle"
    progress: int = 0
    total_pages: int = 0
    current_page: int = 0
    cards_processed: int = 0
    cards_inserted: int = 0
    cards_updated: int = 0
    errors: int = 0
    message: str = "No sync in progress"
    start_time: datetime | None = None
    end_time: datetime | None = None


class SyncStatusRegister:
    """
    Single-slot tracker for catalog sync progress.

    `try_start` is the only way into the running state. It checks and sets
    without awaiting, so within one event loop two triggers cannot both win.
    Across processes there is no guard at all.
    """

    def __init__(self) -> None:
        self._status = SyncStatus()

    def snapshot(self) -> SyncStatus:
        """Return a copy of the current status."""
        return self._status.model_copy()

    @property
    def is_running(self) -> bool:
        return self._status.status == "running"

    def try_start(self) -> bool:
        """
        Reset the register for a new run.

        Returns False, leaving the in-flight run untouched, if a sync is
        already running.
        """
        if self.is_running:
            return False

        self._status = SyncStatus(
            status="running",
            message="Starting sync...",
            start_time=datetime.now(timezone.utc),
        )
        return True

    def update(self, **fields: Any) -> None:
        """Merge partial progress into the current status."""
        self._status = self._status.model_copy(update=fields)

    def complete(self, message: str) -> None:
        self.update(
            status="completed",
            progress=100,
            message=message,
            end_time=datetime.now(timezone.utc),
        )

    def fail(self, message: str) -> None:
        self.update(
            status="error",
            message=message,
            end_time=datetime.now(timezone.utc),
        )

    def reset(self) -> None:
        """Forget the last run and return to idle."""
        self._status = SyncStatus()
