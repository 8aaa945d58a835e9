"""Pydantic schemas for faucet endpoints."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class FaucetClaimRequest(BaseModel):
    account_id: str


class FaucetStatusResponse(BaseModel):
    model_config = {"from_attributes": True}

    account_id: str
    can_claim: bool
    remaining_ms: int
    cooldown_ms: int
    next_claim_at_ms: Optional[int] = None
    amount_tokens: int
    tokens: list[dict]
    not_associated: list[dict]


class FaucetTransferResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    token_id: str
    amount_units: int
    amount_tokens: Decimal


class FaucetClaimResponse(BaseModel):
    model_config = {"from_attributes": True}

    account_id: str
    status: str
    transaction_id: str
    claimed_at_ms: int
    next_claim_at_ms: int
    transfers: list[FaucetTransferResponse]
