"""Store of built-but-unconfirmed transactions."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from poolkeeper.core.exceptions import NotFoundError
from poolkeeper.core.timing import now_utc
from poolkeeper.domain.models import PendingTransaction
from poolkeeper.repositories.protocols import PendingRepository
from poolkeeper.repositories.sqlalchemy.database import atomic

logger = logging.getLogger(__name__)


class PendingStore:
    """
    Pending entries keyed by pending id.

    Entries are created at build time and consumed exactly once when their
    submission is confirmed. An entry older than its `expires_at` is treated
    as gone: `get` reports it as expired and `evict_expired` deletes it.
    """

    def __init__(
        self,
        pending_repo: PendingRepository,
        session: Session,
        ttl_seconds: int = 180,
        clock: Callable = now_utc,
    ):
        self._repo = pending_repo
        self._session = session
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def expires_at_for(self, created_at: datetime) -> datetime:
        return created_at + self._ttl

    def create(self, entry: PendingTransaction) -> str:
        """Persist an entry and return its id. Id collisions raise IntegrityError."""
        with atomic(self._session):
            self._repo.create(entry)
        logger.info("Pending %s created (%s)", entry.pending_id, entry.action.value)
        return entry.pending_id

    def get(self, pending_id: str) -> PendingTransaction:
        entry = self._repo.get(pending_id)
        if entry is None:
            raise NotFoundError("Pending transaction", pending_id)
        if entry.is_expired(self._clock()):
            raise NotFoundError("Pending transaction", pending_id, reason="expired")
        return entry

    def consume(self, pending_id: str) -> None:
        """Delete an entry. A second consume of the same id raises NotFoundError."""
        with atomic(self._session):
            if not self._repo.delete(pending_id):
                raise NotFoundError("Pending transaction", pending_id)
        logger.debug("Pending %s consumed", pending_id)

    def evict_expired(self) -> int:
        with atomic(self._session):
            evicted = self._repo.delete_expired(self._clock())
        if evicted:
            logger.info("Evicted %s expired pending transaction(s)", evicted)
        return evicted

    def list_for_account(self, account_id: str) -> list[PendingTransaction]:
        now = self._clock()
        return [e for e in self._repo.list_by_account(account_id) if not e.is_expired(now)]
