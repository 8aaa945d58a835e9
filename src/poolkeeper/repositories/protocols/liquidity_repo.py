"""Liquidity position repository protocol."""

from typing import Protocol, Optional

from poolkeeper.domain.models import LiquidityPosition, PoolTotals


class LiquidityRepository(Protocol):
    """
    Interface for positions and pool totals.

    Mutations flush but never commit; the caller owns the transaction.
    """

    def get_position(self, account_id: str, pool_key: str) -> Optional[LiquidityPosition]:
        """Get the position for (account, pool)."""
        ...

    def list_positions(self, pool_key: str) -> list[LiquidityPosition]:
        """List all positions in a pool."""
        ...

    def get_totals(self, pool_key: str) -> Optional[PoolTotals]:
        """Get the pool's total units."""
        ...

    def sum_position_units(self, pool_key: str) -> int:
        """Sum of units over every position in the pool."""
        ...

    def increment(
        self,
        account_id: str,
        pool_key: str,
        deposited_a_units: int,
        deposited_b_units: int,
        units: int,
    ) -> None:
        """Atomically add to a position and to the pool total."""
        ...

    def decrement_if_available(self, account_id: str, pool_key: str, units: int) -> bool:
        """
        Atomically burn units when the position holds at least that many.

        Returns False (and changes nothing) otherwise. The pool total is
        decremented by the same amount, floored at zero.
        """
        ...
