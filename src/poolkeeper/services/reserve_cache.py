"""Read-through cache of pool reserves."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Optional

from poolkeeper.core.exceptions import LedgerError
from poolkeeper.core.timing import now_utc, to_epoch_ms
from poolkeeper.domain.models import Pool
from poolkeeper.domain.views import Reserves
from poolkeeper.providers.mirror_provider import MirrorProvider

logger = logging.getLogger(__name__)


class ReserveCache:
    """
    Short-TTL cache of each pool's two token balances.

    A miss reads both balances from the mirror concurrently. Concurrent
    misses for the same pool share one remote read. `invalidate` drops the
    entry and detaches any read already in flight, so a read that started
    before a confirmed submission can never be stored or handed to a caller
    that arrives after it.
    """

    def __init__(
        self,
        mirror: MirrorProvider,
        timeout_seconds: float = 10.0,
        clock: Callable = now_utc,
        max_workers: int = 8,
    ):
        self._mirror = mirror
        self._timeout = timeout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, Reserves] = {}
        self._inflight: dict[str, Future] = {}
        self._generations: dict[str, int] = {}
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="reserve-read")

    def get(self, pool: Pool, ttl_ms: int) -> Reserves:
        """
        Return the pool's reserves, reading through when the entry is older
        than `ttl_ms`. `ttl_ms=0` always reads the mirror.
        """
        key = pool.pool_key
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and ttl_ms > 0 and self._age_ms(entry) < ttl_ms:
                return entry
            future = self._inflight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._inflight[key] = future
                generation = self._generations.get(key, 0)

        if not leader:
            return future.result()

        try:
            reserves = self._read(pool)
        except BaseException as exc:
            with self._lock:
                if self._inflight.get(key) is future:
                    del self._inflight[key]
            future.set_exception(exc)
            raise

        with self._lock:
            if self._generations.get(key, 0) == generation:
                self._entries[key] = reserves
            if self._inflight.get(key) is future:
                del self._inflight[key]
        future.set_result(reserves)
        return reserves

    def invalidate(self, pool_key: str) -> None:
        with self._lock:
            self._entries.pop(pool_key, None)
            self._inflight.pop(pool_key, None)
            self._generations[pool_key] = self._generations.get(pool_key, 0) + 1
        logger.debug("Reserve cache invalidated for %s", pool_key)

    def peek(self, pool_key: str) -> Optional[Reserves]:
        """Cached entry without reading through, or None."""
        with self._lock:
            return self._entries.get(pool_key)

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def _age_ms(self, entry: Reserves) -> int:
        return to_epoch_ms(self._clock()) - to_epoch_ms(entry.observed_at)

    def _read(self, pool: Pool) -> Reserves:
        read_a = self._executor.submit(
            self._mirror.get_token_balance, pool.pool_account_id, pool.token_a.token_id
        )
        read_b = self._executor.submit(
            self._mirror.get_token_balance, pool.pool_account_id, pool.token_b.token_id
        )
        _, not_done = wait([read_a, read_b], timeout=self._timeout)
        if not_done:
            for pending in not_done:
                pending.cancel()
            logger.warning("Reserve read for %s timed out after %ss", pool.pool_key, self._timeout)
            raise LedgerError(f"Reserve read timed out for pool {pool.pool_key}", retryable=True)
        return Reserves(
            reserve_a=int(read_a.result()),
            reserve_b=int(read_b.result()),
            observed_at=self._clock(),
        )
