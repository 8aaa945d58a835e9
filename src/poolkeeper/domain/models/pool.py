"""Pool and token registry models."""

from dataclasses import dataclass
from typing import Optional

from poolkeeper.domain.models.enums import SwapDirection


@dataclass(frozen=True)
class Token:
    """A ledger token known to the registry."""

    symbol: str
    token_id: str
    decimals: int = 6

    @property
    def one(self) -> int:
        """Smallest units per whole token."""
        return 10 ** self.decimals


@dataclass(frozen=True)
class Pool:
    """
    Constant-product pool under a custodial ledger account.

    The token pair is fixed for the pool's lifetime. Reserves are not stored
    here; they are read from the remote ledger through the reserve cache.
    """

    pool_key: str
    pool_account_id: str
    token_a: Token
    token_b: Token
    fee_bps: int = 30

    @property
    def tokens(self) -> tuple[Token, Token]:
        return (self.token_a, self.token_b)

    def direction(self, from_symbol: str, to_symbol: str) -> Optional[SwapDirection]:
        if from_symbol == self.token_a.symbol and to_symbol == self.token_b.symbol:
            return SwapDirection.A_TO_B
        if from_symbol == self.token_b.symbol and to_symbol == self.token_a.symbol:
            return SwapDirection.B_TO_A
        return None

    def tokens_for(self, direction: SwapDirection) -> tuple[Token, Token]:
        """Return (token_in, token_out) for a direction."""
        if direction == SwapDirection.A_TO_B:
            return self.token_a, self.token_b
        return self.token_b, self.token_a
