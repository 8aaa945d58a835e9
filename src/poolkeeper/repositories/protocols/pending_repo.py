"""Pending transaction repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from poolkeeper.domain.models import PendingTransaction


class PendingRepository(Protocol):
    """Interface for pending-transaction records."""

    def create(self, entry: PendingTransaction) -> PendingTransaction:
        """Persist a new entry. Raises IntegrityError on a duplicate id."""
        ...

    def get(self, pending_id: str) -> Optional[PendingTransaction]:
        """Retrieve an entry by id."""
        ...

    def delete(self, pending_id: str) -> bool:
        """Delete an entry. Returns False if nothing was deleted."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete entries whose expiry is at or before `now`."""
        ...

    def list_by_account(self, account_id: str) -> list[PendingTransaction]:
        """List an account's entries, oldest first."""
        ...
