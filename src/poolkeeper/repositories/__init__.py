"""Repository layer - data access abstractions and implementations."""

from poolkeeper.repositories.protocols import (
    PoolRepository,
    LiquidityRepository,
    PendingRepository,
    FaucetRepository,
)

__all__ = [
    "PoolRepository",
    "LiquidityRepository",
    "PendingRepository",
    "FaucetRepository",
]
