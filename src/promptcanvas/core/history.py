"""In-memory generation history.

The ledger keeps the most recent generations, newest first, and forgets the
oldest once its capacity is exceeded.  It lives on the application instance
and is not persisted: restarting the server starts with an empty history.

Route handlers run in FastAPI's threadpool, so every access is serialised by
a lock.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any

from promptcanvas.core.models import HistoryEntry
from promptcanvas.core.storage import new_request_stamp

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistoryLedger:
    """Bounded, thread-safe, newest-first list of :class:`HistoryEntry`.

    Args:
        capacity: Maximum number of entries kept.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, entry: HistoryEntry) -> None:
        """Insert *entry* at the front, evicting the oldest entry when full."""
        with self._lock:
            self._entries.appendleft(entry)

    def list(self) -> list[HistoryEntry]:
        """Return a snapshot of the entries, newest first."""
        with self._lock:
            return list(self._entries)

    def record(
        self,
        prompt: str | None,
        image_url: str | None,
        settings: dict[str, Any] | None = None,
        duration: float | None = None,
    ) -> HistoryEntry:
        """Build a new entry stamped with the current time and append it."""
        entry = HistoryEntry(
            id=str(new_request_stamp()),
            prompt=prompt,
            image_url=image_url,
            settings=settings,
            duration=duration,
            created_at=datetime.now(timezone.utc),
        )
        self.append(entry)
        logger.debug(f"History entry {entry.id} recorded")
        return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
