"""Per-key mutual exclusion."""

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class KeyedLock:
    """
    Hands out one lock per key and forgets it when nobody holds or waits on it.

    Used to serialize work scoped to a pool, an (account, pool) pair, a
    pending id or a faucet account.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._refcounts: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._refcounts[key] = self._refcounts.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._refcounts[key] -= 1
                if self._refcounts[key] == 0:
                    del self._refcounts[key]
                    del self._locks[key]

    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)
