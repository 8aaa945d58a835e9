"""Repository protocol definitions (interfaces)."""

from poolkeeper.repositories.protocols.pool_repo import PoolRepository
from poolkeeper.repositories.protocols.liquidity_repo import LiquidityRepository
from poolkeeper.repositories.protocols.pending_repo import PendingRepository
from poolkeeper.repositories.protocols.faucet_repo import FaucetRepository

__all__ = [
    "PoolRepository",
    "LiquidityRepository",
    "PendingRepository",
    "FaucetRepository",
]
