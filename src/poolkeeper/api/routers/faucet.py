"""Faucet endpoints."""

from fastapi import APIRouter, Depends, Query

from poolkeeper.api.deps import get_faucet_gate
from poolkeeper.api.schemas import FaucetClaimRequest, FaucetClaimResponse, FaucetStatusResponse
from poolkeeper.services import FaucetGate

router = APIRouter(prefix="/faucet", tags=["faucet"])


@router.get("/status", response_model=FaucetStatusResponse)
def faucet_status(
    account_id: str = Query(..., description="Ledger account id"),
    faucet: FaucetGate = Depends(get_faucet_gate),
) -> FaucetStatusResponse:
    """Cooldown state and missing token associations."""
    return FaucetStatusResponse.model_validate(faucet.status(account_id))


@router.post("/claim", response_model=FaucetClaimResponse)
def faucet_claim(
    data: FaucetClaimRequest,
    faucet: FaucetGate = Depends(get_faucet_gate),
) -> FaucetClaimResponse:
    """Claim test tokens."""
    return FaucetClaimResponse.model_validate(faucet.claim(data.account_id))
