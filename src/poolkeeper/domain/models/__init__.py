"""Domain models package."""

from poolkeeper.domain.models.enums import PendingAction, SwapDirection, TxStatus
from poolkeeper.domain.models.pool import Token, Pool
from poolkeeper.domain.models.liquidity import LiquidityPosition, PoolTotals
from poolkeeper.domain.models.pending import PendingTransaction, make_pending_id
from poolkeeper.domain.models.faucet import FaucetClaim

__all__ = [
    "PendingAction",
    "SwapDirection",
    "TxStatus",
    "Token",
    "Pool",
    "LiquidityPosition",
    "PoolTotals",
    "PendingTransaction",
    "make_pending_id",
    "FaucetClaim",
]
