"""Domain layer - pure business models and pricing with no external dependencies."""

from poolkeeper.domain.models import (
    PendingAction,
    SwapDirection,
    TxStatus,
    Token,
    Pool,
    LiquidityPosition,
    PoolTotals,
    PendingTransaction,
    FaucetClaim,
)

__all__ = [
    "PendingAction",
    "SwapDirection",
    "TxStatus",
    "Token",
    "Pool",
    "LiquidityPosition",
    "PoolTotals",
    "PendingTransaction",
    "FaucetClaim",
]
