"""Bounded snapshot-based undo/redo.

Entries hold independent deep copies of the diagram. ``push`` stores the
state from *before* a mutation; the live state after the latest mutation is
recorded lazily, on the first ``undo`` from the tip, so ``redo`` can restore
it exactly.
"""

import logging
from typing import List, Optional

from erd_core.model import Diagram

logger = logging.getLogger(__name__)

MAX_HISTORY_SIZE = 50


class HistoryManager:
    def __init__(self, limit: int = MAX_HISTORY_SIZE) -> None:
        if limit < 2:
            raise ValueError("History limit must be at least 2.")
        self.limit = limit
        self._entries: List[Diagram] = []
        self._index = -1

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self) -> None:
        while len(self._entries) > self.limit:
            self._entries.pop(0)
            self._index -= 1

    def push(self, snapshot: Diagram) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(snapshot.copy())
        self._evict()
        self._index = len(self._entries) - 1

    def can_undo(self) -> bool:
        return self._index >= 0

    def can_redo(self) -> bool:
        return self._index + 2 < len(self._entries)

    def undo(self, current: Diagram) -> Optional[Diagram]:
        if not self.can_undo():
            logger.debug("Nothing to undo.")
            return None
        if self._index + 1 == len(self._entries):
            self._entries.append(current.copy())
            self._evict()
        else:
            self._entries[self._index + 1] = current.copy()
        restored = self._entries[self._index].copy()
        self._index -= 1
        return restored

    def redo(self) -> Optional[Diagram]:
        if not self.can_redo():
            logger.debug("Nothing to redo.")
            return None
        self._index += 1
        return self._entries[self._index + 1].copy()

    def clear(self) -> None:
        self._entries = []
        self._index = -1
