"""Transaction build and submit endpoints."""

import base64
import binascii

from fastapi import APIRouter, Depends, Query

from poolkeeper.api.deps import get_coordinator, get_pending_store
from poolkeeper.api.routers.pools import quote_response
from poolkeeper.api.schemas import (
    BuildLiquidityAddRequest,
    BuildLiquidityRemoveRequest,
    BuildResponse,
    BuildSwapRequest,
    PendingResponse,
    SubmitRequest,
    SubmitResponse,
)
from poolkeeper.core.exceptions import ValidationError
from poolkeeper.domain.views import BuildResult
from poolkeeper.services import PendingStore, TransactionCoordinator

router = APIRouter(prefix="/tx", tags=["transactions"])


def _build_response(result: BuildResult) -> BuildResponse:
    return BuildResponse(
        pending_id=result.pending_id,
        action=result.action,
        pool_key=result.pool_key,
        account_id=result.account_id,
        transaction_id=result.transaction_id,
        tx_bytes_base64=base64.b64encode(result.tx_bytes).decode("ascii"),
        expires_at=result.expires_at,
        amounts=result.amounts,
        quote=quote_response(result.quote) if result.quote else None,
    )


@router.post("/build/swap", response_model=BuildResponse)
def build_swap(
    data: BuildSwapRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> BuildResponse:
    """Build an unsigned swap transaction."""
    result = coordinator.build_swap(
        data.pool_key,
        data.account_id,
        data.from_symbol,
        data.to_symbol,
        data.amount,
        slippage_bps=data.slippage_bps,
    )
    return _build_response(result)


@router.post("/build/liquidity/add", response_model=BuildResponse)
def build_liquidity_add(
    data: BuildLiquidityAddRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> BuildResponse:
    """Build an unsigned deposit transaction."""
    result = coordinator.build_liquidity_add(
        data.pool_key,
        data.account_id,
        data.amount_a,
        amount_b=data.amount_b,
    )
    return _build_response(result)


@router.post("/build/liquidity/remove", response_model=BuildResponse)
def build_liquidity_remove(
    data: BuildLiquidityRemoveRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> BuildResponse:
    """Build an unsigned withdrawal transaction."""
    result = coordinator.build_liquidity_remove(
        data.pool_key,
        data.account_id,
        percent=data.percent,
        units=data.units,
    )
    return _build_response(result)


@router.post("/submit", response_model=SubmitResponse)
def submit(
    data: SubmitRequest,
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> SubmitResponse:
    """Countersign and submit a signed transaction."""
    try:
        signed = base64.b64decode(data.signed_tx_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("signed_tx_base64 is not valid base64") from e

    result = coordinator.submit(data.pending_id, signed)
    return SubmitResponse(
        pending_id=result.pending_id,
        action=result.action,
        status=result.status,
        transaction_id=result.transaction_id,
        pool_key=result.pool_key,
        account_id=result.account_id,
    )


@router.get("/pending", response_model=list[PendingResponse])
def list_pending(
    account_id: str = Query(..., description="Ledger account id"),
    pending: PendingStore = Depends(get_pending_store),
) -> list[PendingResponse]:
    """List an account's unexpired pending transactions."""
    return [PendingResponse.model_validate(e) for e in pending.list_for_account(account_id)]


@router.get("/pending/{pending_id}", response_model=PendingResponse)
def get_pending(
    pending_id: str,
    pending: PendingStore = Depends(get_pending_store),
) -> PendingResponse:
    """Inspect a pending transaction."""
    return PendingResponse.model_validate(pending.get(pending_id))
