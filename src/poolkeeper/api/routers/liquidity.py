"""Liquidity position endpoints."""

from fastapi import APIRouter, Depends, Query

from poolkeeper.api.deps import get_coordinator, get_liquidity_ledger, get_registry
from poolkeeper.api.schemas import PositionResponse, TotalsCheckResponse
from poolkeeper.services import LiquidityLedger, PoolRegistryService, TransactionCoordinator

router = APIRouter(prefix="/liquidity", tags=["liquidity"])


@router.get("/position", response_model=PositionResponse)
def get_position(
    account_id: str = Query(..., description="Ledger account id"),
    pool_key: str = Query(..., description="Pool key"),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> PositionResponse:
    """Deposited totals, units and a full-withdrawal estimate."""
    return PositionResponse.model_validate(coordinator.get_position(account_id, pool_key))


@router.get("/totals/{pool_key}", response_model=TotalsCheckResponse)
def check_totals(
    pool_key: str,
    registry: PoolRegistryService = Depends(get_registry),
    liquidity: LiquidityLedger = Depends(get_liquidity_ledger),
) -> TotalsCheckResponse:
    """Compare the pool's stored total units with the sum of its positions."""
    registry.get_pool(pool_key)
    check = liquidity.verify_totals(pool_key)
    return TotalsCheckResponse(
        pool_key=check.pool_key,
        stored_total=check.stored_total,
        positions_sum=check.positions_sum,
        drift=check.drift,
        consistent=check.consistent,
    )
