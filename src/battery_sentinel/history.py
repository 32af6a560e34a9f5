"""
Rolling battery history, pruned to the last seven days on every append.
"""

import logging
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, List

from .config import HISTORY_KEY
from .models import HistoryEntry
from .store import KeyValueStore

logger = logging.getLogger(__name__)

RETENTION = timedelta(days=7)


class HistoryStore:
    """Append-only time series backed by a key-value store."""

    def __init__(self, store: KeyValueStore, clock: Callable[[], datetime] = datetime.now,
                 retention: timedelta = RETENTION):
        self.store = store
        self.clock = clock
        self.retention = retention
        self._lock = Lock()

    def read(self) -> List[HistoryEntry]:
        """Entries in stored order (not necessarily sorted)."""
        entries = []
        for raw in self.store.get(HISTORY_KEY) or []:
            try:
                entries.append(HistoryEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed history entry %r: %s", raw, e)
        return entries

    def append(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """Add one entry, drop everything older than the retention window, persist."""
        with self._lock:
            cutoff = self.clock() - self.retention
            entries = [e for e in self.read() + [entry] if e.timestamp >= cutoff]
            self.store.set(HISTORY_KEY, [e.to_dict() for e in entries])

        logger.debug("History now holds %d entries", len(entries))
        return entries
