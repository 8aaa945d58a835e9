"""Pydantic schemas for API request/response."""

from poolkeeper.api.schemas.pool import (
    TokenResponse,
    PoolResponse,
    ReservesResponse,
    PoolStateResponse,
    QuoteResponse,
)
from poolkeeper.api.schemas.tx import (
    BuildSwapRequest,
    BuildLiquidityAddRequest,
    BuildLiquidityRemoveRequest,
    BuildResponse,
    SubmitRequest,
    SubmitResponse,
    PendingResponse,
)
from poolkeeper.api.schemas.liquidity import PositionResponse, TotalsCheckResponse
from poolkeeper.api.schemas.faucet import (
    FaucetClaimRequest,
    FaucetStatusResponse,
    FaucetTransferResponse,
    FaucetClaimResponse,
)

__all__ = [
    "TokenResponse",
    "PoolResponse",
    "ReservesResponse",
    "PoolStateResponse",
    "QuoteResponse",
    "BuildSwapRequest",
    "BuildLiquidityAddRequest",
    "BuildLiquidityRemoveRequest",
    "BuildResponse",
    "SubmitRequest",
    "SubmitResponse",
    "PendingResponse",
    "PositionResponse",
    "TotalsCheckResponse",
    "FaucetClaimRequest",
    "FaucetStatusResponse",
    "FaucetTransferResponse",
    "FaucetClaimResponse",
]
