"""
app/services/rotation.py

Purpose: Round-robin destination selection

- Holds the rotation cursor over the configured destinations
- Hands out destinations in configured order, one per call
- No weighting and no health checks: a failing destination keeps its turn
"""

import threading
from typing import List, Sequence

from app.core.exceptions import ConfigurationError
from app.models.destination import Destination


class DestinationRotator:
    """
    Round-robin selector over an ordered, non-empty destination list.

    Reading and advancing the cursor happen under one lock, so concurrent
    callers always get consecutive destinations.
    """

    def __init__(self, destinations: Sequence[Destination]):
        if not destinations:
            raise ConfigurationError("DestinationRotator needs at least one destination")

        self._destinations = tuple(destinations)
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def destinations(self) -> List[Destination]:
        return list(self._destinations)

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._destinations)

    def next(self) -> Destination:
        """Returns the destination at the cursor and advances the cursor."""
        with self._lock:
            dest = self._destinations[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._destinations)
        return dest

    def reset(self) -> None:
        with self._lock:
            self._cursor = 0
