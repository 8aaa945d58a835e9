"""View models for service outputs."""

from poolkeeper.domain.views.ledger import (
    Reserves,
    PoolStateView,
    SwapQuote,
    BuildResult,
    SubmitResult,
    PositionView,
    TotalsCheck,
    FaucetTransfer,
    FaucetStatusView,
    FaucetClaimResult,
)

__all__ = [
    "Reserves",
    "PoolStateView",
    "SwapQuote",
    "BuildResult",
    "SubmitResult",
    "PositionView",
    "TotalsCheck",
    "FaucetTransfer",
    "FaucetStatusView",
    "FaucetClaimResult",
]
