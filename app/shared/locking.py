"""
Per-key mutual exclusion.

Serializes read-modify-write sequences on the same key (a balance or an
order) while letting work on unrelated keys proceed in parallel.
"""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class _Entry:
    """A key's lock and the number of callers holding or waiting for it."""

    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLocks:
    """Registry handing out one lock per key.

    ``hold`` acquires a batch of keys in sorted order, so two callers
    asking for overlapping batches can never deadlock on each other.
    Callers that need a second batch while holding a first must keep a
    fixed order between the two kinds of keys.

    A key stays registered only while someone holds or waits for it, so
    the registry does not grow with the number of orders ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _checkout(self, key: Hashable) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry.lock

    def _checkin(self, key: Hashable) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        """Hold the locks of all given keys for the duration of the block."""
        ordered = sorted(set(keys))
        acquired: list[tuple[Hashable, threading.Lock]] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)


def balance_key(customer_id: str, asset_name: str) -> tuple[str, str, str]:
    return ("balance", customer_id, asset_name)


def order_key(order_id: str) -> tuple[str, str]:
    return ("order", order_id)
