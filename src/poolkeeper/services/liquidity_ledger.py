"""Liquidity ownership ledger."""

import logging

from sqlalchemy.orm import Session

from poolkeeper.core.exceptions import IntegrityError, InsufficientUnitsError
from poolkeeper.domain.models import LiquidityPosition
from poolkeeper.domain.views import TotalsCheck
from poolkeeper.repositories.protocols import LiquidityRepository
from poolkeeper.repositories.sqlalchemy.database import atomic

logger = logging.getLogger(__name__)


class LiquidityLedger:
    """
    Per-(account, pool) liquidity positions and per-pool issued units.

    `apply_add` and `apply_remove` are the only operations that change
    positions or totals. Each runs in `atomic(session)`, so when called
    inside an outer atomic block they commit together with it.
    """

    def __init__(self, liquidity_repo: LiquidityRepository, session: Session):
        self._repo = liquidity_repo
        self._session = session

    def get_position(self, account_id: str, pool_key: str) -> LiquidityPosition:
        """Position for (account, pool); an empty position if none exists."""
        position = self._repo.get_position(account_id, pool_key)
        if position is None:
            return LiquidityPosition(account_id=account_id, pool_key=pool_key)
        return position

    def get_total_units(self, pool_key: str) -> int:
        totals = self._repo.get_totals(pool_key)
        return totals.total_units if totals else 0

    def apply_add(
        self,
        account_id: str,
        pool_key: str,
        amount_a_units: int,
        amount_b_units: int,
        mint_units: int,
    ) -> LiquidityPosition:
        """Credit a confirmed deposit and its minted units."""
        if mint_units <= 0:
            logger.error("Refusing non-positive mint %s for %s in %s", mint_units, account_id, pool_key)
            raise IntegrityError(f"Mint units must be positive, got {mint_units}")
        if amount_a_units < 0 or amount_b_units < 0:
            raise IntegrityError("Deposited amounts must not be negative")

        with atomic(self._session):
            self._repo.increment(account_id, pool_key, amount_a_units, amount_b_units, mint_units)
        logger.info("Minted %s units for %s in %s", mint_units, account_id, pool_key)
        return self.get_position(account_id, pool_key)

    def apply_remove(self, account_id: str, pool_key: str, burn_units: int) -> LiquidityPosition:
        """Burn units from a position. The pool total never goes below zero."""
        if burn_units <= 0:
            logger.error("Refusing non-positive burn %s for %s in %s", burn_units, account_id, pool_key)
            raise IntegrityError(f"Burn units must be positive, got {burn_units}")

        with atomic(self._session):
            if not self._repo.decrement_if_available(account_id, pool_key, burn_units):
                available = self.get_position(account_id, pool_key).units
                raise InsufficientUnitsError(account_id, pool_key, burn_units, available)
        logger.info("Burned %s units for %s in %s", burn_units, account_id, pool_key)
        return self.get_position(account_id, pool_key)

    def verify_totals(self, pool_key: str) -> TotalsCheck:
        """Compare the stored pool total against the sum of its positions."""
        check = TotalsCheck(
            pool_key=pool_key,
            stored_total=self.get_total_units(pool_key),
            positions_sum=self._repo.sum_position_units(pool_key),
        )
        if not check.consistent:
            logger.error(
                "Liquidity totals drift for %s: stored=%s positions=%s",
                pool_key,
                check.stored_total,
                check.positions_sum,
            )
        return check
