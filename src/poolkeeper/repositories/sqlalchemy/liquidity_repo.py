"""SQLAlchemy implementation of LiquidityRepository."""

from typing import Optional

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from poolkeeper.core.timing import now_utc, to_naive_utc, to_utc
from poolkeeper.domain.models import LiquidityPosition, PoolTotals
from poolkeeper.repositories.sqlalchemy.orm_models import LiquidityPositionORM, PoolTotalsORM


class SqlAlchemyLiquidityRepository:
    """
    SQLAlchemy-backed positions and pool totals.

    Counters are changed with single UPDATE statements (`units = units + n`)
    and burns with a compare-and-swap (`... WHERE units >= n`), so two
    concurrent applies cannot interleave into a lost update.
    """

    def __init__(self, db: Session):
        self._db = db

    def get_position(self, account_id: str, pool_key: str) -> Optional[LiquidityPosition]:
        """Get the position for (account, pool)."""
        orm_pos = self._db.get(LiquidityPositionORM, (account_id, pool_key), populate_existing=True)
        return self._position_to_domain(orm_pos) if orm_pos else None

    def list_positions(self, pool_key: str) -> list[LiquidityPosition]:
        """List all positions in a pool."""
        orm_positions = (
            self._db.query(LiquidityPositionORM)
            .filter(LiquidityPositionORM.pool_key == pool_key)
            .order_by(LiquidityPositionORM.account_id)
            .populate_existing()
            .all()
        )
        return [self._position_to_domain(p) for p in orm_positions]

    def get_totals(self, pool_key: str) -> Optional[PoolTotals]:
        """Get the pool's total units."""
        orm_totals = self._db.get(PoolTotalsORM, pool_key, populate_existing=True)
        return self._totals_to_domain(orm_totals) if orm_totals else None

    def sum_position_units(self, pool_key: str) -> int:
        """Sum of units over every position in the pool."""
        total = self._db.execute(
            select(func.coalesce(func.sum(LiquidityPositionORM.units), 0)).where(
                LiquidityPositionORM.pool_key == pool_key
            )
        ).scalar_one()
        return int(total)

    def increment(
        self,
        account_id: str,
        pool_key: str,
        deposited_a_units: int,
        deposited_b_units: int,
        units: int,
    ) -> None:
        """Atomically add to a position and to the pool total."""
        now = to_naive_utc(now_utc())
        self._ensure_rows(account_id, pool_key, now)
        self._db.execute(
            update(LiquidityPositionORM)
            .where(
                LiquidityPositionORM.account_id == account_id,
                LiquidityPositionORM.pool_key == pool_key,
            )
            .values(
                deposited_a_units=LiquidityPositionORM.deposited_a_units + deposited_a_units,
                deposited_b_units=LiquidityPositionORM.deposited_b_units + deposited_b_units,
                units=LiquidityPositionORM.units + units,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        self._db.execute(
            update(PoolTotalsORM)
            .where(PoolTotalsORM.pool_key == pool_key)
            .values(total_units=PoolTotalsORM.total_units + units, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        self._db.flush()

    def decrement_if_available(self, account_id: str, pool_key: str, units: int) -> bool:
        """Atomically burn units when the position holds at least that many."""
        now = to_naive_utc(now_utc())
        result = self._db.execute(
            update(LiquidityPositionORM)
            .where(
                LiquidityPositionORM.account_id == account_id,
                LiquidityPositionORM.pool_key == pool_key,
                LiquidityPositionORM.units >= units,
            )
            .values(units=LiquidityPositionORM.units - units, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self._db.execute(
            update(PoolTotalsORM)
            .where(PoolTotalsORM.pool_key == pool_key)
            .values(
                total_units=case(
                    (PoolTotalsORM.total_units > units, PoolTotalsORM.total_units - units),
                    else_=0,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        self._db.flush()
        return True

    def _ensure_rows(self, account_id: str, pool_key: str, now) -> None:
        """Create zeroed position/total rows if they do not exist yet."""
        self._insert_or_ignore(
            LiquidityPositionORM,
            dict(
                account_id=account_id,
                pool_key=pool_key,
                deposited_a_units=0,
                deposited_b_units=0,
                units=0,
                updated_at=now,
            ),
        )
        self._insert_or_ignore(PoolTotalsORM, dict(pool_key=pool_key, total_units=0, updated_at=now))

    def _insert_or_ignore(self, model, values: dict) -> None:
        # Another writer may create the row between a check and an insert.
        dialect = self._db.get_bind().dialect.name
        if dialect == "sqlite":
            stmt = sqlite_insert(model).values(**values).on_conflict_do_nothing()
        elif dialect == "postgresql":
            stmt = pg_insert(model).values(**values).on_conflict_do_nothing()
        else:
            key = tuple(values[c.name] for c in model.__table__.primary_key.columns)
            if self._db.get(model, key if len(key) > 1 else key[0]) is not None:
                return
            stmt = insert(model).values(**values)
        self._db.execute(stmt)

    @staticmethod
    def _position_to_domain(orm: LiquidityPositionORM) -> LiquidityPosition:
        return LiquidityPosition(
            account_id=orm.account_id,
            pool_key=orm.pool_key,
            deposited_a_units=int(orm.deposited_a_units or 0),
            deposited_b_units=int(orm.deposited_b_units or 0),
            units=int(orm.units or 0),
            updated_at=to_utc(orm.updated_at) if orm.updated_at else None,
        )

    @staticmethod
    def _totals_to_domain(orm: PoolTotalsORM) -> PoolTotals:
        return PoolTotals(
            pool_key=orm.pool_key,
            total_units=int(orm.total_units or 0),
            updated_at=to_utc(orm.updated_at) if orm.updated_at else None,
        )
