"""Pool registry and quote endpoints."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from poolkeeper.api.deps import get_coordinator, get_registry
from poolkeeper.api.schemas import (
    PoolResponse,
    PoolStateResponse,
    QuoteResponse,
    ReservesResponse,
    TokenResponse,
)
from poolkeeper.domain.models import Pool
from poolkeeper.domain.views import Reserves, SwapQuote
from poolkeeper.services import PoolRegistryService, TransactionCoordinator

router = APIRouter(tags=["pools"])


def _pool_fields(pool: Pool) -> dict:
    return {
        "pool_key": pool.pool_key,
        "pool_account_id": pool.pool_account_id,
        "token_a": TokenResponse.model_validate(pool.token_a),
        "token_b": TokenResponse.model_validate(pool.token_b),
        "fee_bps": pool.fee_bps,
    }


def reserves_response(reserves: Reserves) -> ReservesResponse:
    return ReservesResponse(
        reserve_a=reserves.reserve_a,
        reserve_b=reserves.reserve_b,
        observed_at=reserves.observed_at,
    )


def quote_response(quote: SwapQuote) -> QuoteResponse:
    return QuoteResponse(
        pool_key=quote.pool_key,
        from_symbol=quote.from_symbol,
        to_symbol=quote.to_symbol,
        token_in_id=quote.token_in_id,
        token_out_id=quote.token_out_id,
        fee_bps=quote.fee_bps,
        slippage_bps=quote.slippage_bps,
        amount_in_units=quote.amount_in_units,
        amount_out_units=quote.amount_out_units,
        min_out_units=quote.min_out_units,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        min_out=quote.min_out,
        reserves=reserves_response(quote.reserves),
    )


@router.get("/pools", response_model=list[PoolResponse])
def list_pools(registry: PoolRegistryService = Depends(get_registry)) -> list[PoolResponse]:
    """List registered pools."""
    return [PoolResponse(**_pool_fields(p)) for p in registry.list_pools()]


@router.get("/tokens", response_model=list[TokenResponse])
def list_tokens(registry: PoolRegistryService = Depends(get_registry)) -> list[TokenResponse]:
    """List registered tokens."""
    return [TokenResponse.model_validate(t) for t in registry.list_tokens()]


@router.get("/pools/{pool_key}", response_model=PoolStateResponse)
def get_pool_state(
    pool_key: str,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> PoolStateResponse:
    """Pool with reserves read fresh from the ledger."""
    state = coordinator.pool_state(pool_key)
    return PoolStateResponse(
        **_pool_fields(state.pool),
        reserves=reserves_response(state.reserves),
        total_units=state.total_units,
    )


@router.get("/quote", response_model=QuoteResponse)
def get_quote(
    pool_key: str = Query(..., description="Pool key"),
    from_symbol: str = Query(..., alias="from", description="Token sold"),
    to_symbol: str = Query(..., alias="to", description="Token bought"),
    amount: Decimal = Query(..., description="Amount sold, in whole tokens"),
    fee_bps: Optional[int] = Query(None, description="Fee override for this quote"),
    slippage_bps: Optional[int] = Query(None),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> QuoteResponse:
    """Quote an exact-in swap."""
    quote = coordinator.quote_swap(
        pool_key,
        from_symbol,
        to_symbol,
        amount,
        fee_bps=fee_bps,
        slippage_bps=slippage_bps,
    )
    return quote_response(quote)
