"""SQLAlchemy implementation of PendingRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError as DbIntegrityError
from sqlalchemy.orm import Session

from poolkeeper.core.exceptions import IntegrityError
from poolkeeper.core.timing import to_naive_utc, to_utc
from poolkeeper.domain.models import PendingTransaction
from poolkeeper.repositories.sqlalchemy.orm_models import PendingTransactionORM

_AMOUNT_FIELDS = (
    "amount_in_units",
    "amount_out_units",
    "min_out_units",
    "amount_a_units",
    "amount_b_units",
    "mint_units",
    "burn_units",
)


class SqlAlchemyPendingRepository:
    """SQLAlchemy-backed pending-transaction table."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, entry: PendingTransaction) -> PendingTransaction:
        """Persist a new entry. A duplicate id is a programming error."""
        if self._db.get(PendingTransactionORM, entry.pending_id) is not None:
            raise IntegrityError(f"Pending id collision: {entry.pending_id}")
        orm_entry = self._to_orm(entry)
        self._db.add(orm_entry)
        try:
            self._db.flush()
        except DbIntegrityError as exc:
            raise IntegrityError(f"Pending id collision: {entry.pending_id}") from exc
        return self._to_domain(orm_entry)

    def get(self, pending_id: str) -> Optional[PendingTransaction]:
        """Retrieve an entry by id."""
        orm_entry = self._db.get(PendingTransactionORM, pending_id, populate_existing=True)
        return self._to_domain(orm_entry) if orm_entry else None

    def delete(self, pending_id: str) -> bool:
        """Delete an entry. Returns False if nothing was deleted."""
        result = self._db.execute(
            delete(PendingTransactionORM)
            .where(PendingTransactionORM.pending_id == pending_id)
            .execution_options(synchronize_session="fetch")
        )
        self._db.flush()
        return result.rowcount == 1

    def delete_expired(self, now: datetime) -> int:
        """Delete entries whose expiry is at or before `now`."""
        result = self._db.execute(
            delete(PendingTransactionORM)
            .where(PendingTransactionORM.expires_at <= to_naive_utc(now))
            .execution_options(synchronize_session="fetch")
        )
        self._db.flush()
        return result.rowcount or 0

    def list_by_account(self, account_id: str) -> list[PendingTransaction]:
        """List an account's entries, oldest first."""
        orm_entries = (
            self._db.query(PendingTransactionORM)
            .filter(PendingTransactionORM.account_id == account_id)
            .order_by(PendingTransactionORM.created_at)
            .all()
        )
        return [self._to_domain(e) for e in orm_entries]

    @staticmethod
    def _to_orm(entry: PendingTransaction) -> PendingTransactionORM:
        """Convert domain model to ORM model."""
        return PendingTransactionORM(
            pending_id=entry.pending_id,
            action=entry.action,
            account_id=entry.account_id,
            pool_key=entry.pool_key,
            pool_account_id=entry.pool_account_id,
            transaction_id=entry.transaction_id,
            body_hash=entry.body_hash,
            created_at=to_naive_utc(entry.created_at),
            expires_at=to_naive_utc(entry.expires_at),
            token_in_id=entry.token_in_id,
            token_out_id=entry.token_out_id,
            token_a_id=entry.token_a_id,
            token_b_id=entry.token_b_id,
            fee_bps=entry.fee_bps,
            slippage_bps=entry.slippage_bps,
            **{name: getattr(entry, name) for name in _AMOUNT_FIELDS},
        )

    @staticmethod
    def _to_domain(orm: PendingTransactionORM) -> PendingTransaction:
        """Convert ORM model to domain model."""
        return PendingTransaction(
            pending_id=orm.pending_id,
            action=orm.action,
            account_id=orm.account_id,
            pool_key=orm.pool_key,
            pool_account_id=orm.pool_account_id,
            transaction_id=orm.transaction_id,
            body_hash=orm.body_hash,
            created_at=to_utc(orm.created_at),
            expires_at=to_utc(orm.expires_at),
            token_in_id=orm.token_in_id,
            token_out_id=orm.token_out_id,
            token_a_id=orm.token_a_id,
            token_b_id=orm.token_b_id,
            fee_bps=orm.fee_bps,
            slippage_bps=orm.slippage_bps,
            **{name: int(getattr(orm, name) or 0) for name in _AMOUNT_FIELDS},
        )
