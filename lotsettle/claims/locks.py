"""Process-local serialization of claim transitions per ticket."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class TicketLockRegistry:
    """Hands out one exclusive lock per ticket id.

    Entries are dropped once no thread holds or waits on them, so the
    registry does not grow with the number of tickets ever claimed.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, list] = {}

    @contextmanager
    def hold(self, ticket_id: int) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(ticket_id)
            if entry is None:
                entry = self._locks[ticket_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[ticket_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


DEFAULT_TICKET_LOCKS = TicketLockRegistry()

__all__ = ["DEFAULT_TICKET_LOCKS", "TicketLockRegistry"]
