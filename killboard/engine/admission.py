"""
killboard.engine.admission — Admission Filter for Polled Events
================================================================

Decides whether a fetched event is new enough and unseen.

Two gates, in order:

1. **Timestamp gate** — events strictly older than ``last_check`` were
   covered by a previous tick and are dropped, whether or not their key
   is still remembered.
2. **Composite-key gate** — the ``(event_id, timestamp)`` pair must not
   have been admitted before.  Event id alone is not enough: the same
   event shows up in the feeds of every member involved in it.

Remembered keys live in an insertion-ordered map with a hard capacity.
Each insertion beyond capacity evicts the single oldest key, so the
filter's memory is bounded for the whole uptime of the bot.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Hashable
from datetime import datetime

__all__ = ["AdmissionFilter"]


class AdmissionFilter:
    """Bounded, insertion-ordered set of admitted composite keys."""

    def __init__(self, capacity: int = 1000) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._seen: OrderedDict[Hashable, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._seen

    def admit(
        self,
        key: Hashable,
        timestamp: datetime,
        last_check: datetime | None,
    ) -> bool:
        """Return True and remember *key* if the event should be processed."""
        if last_check is not None and timestamp < last_check:
            return False
        if key in self._seen:
            return False
        self._seen[key] = None
        while len(self._seen) > self.capacity:
            self._seen.popitem(last=False)
        return True

    def clear(self) -> None:
        self._seen.clear()
