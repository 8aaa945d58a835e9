"""Pydantic schemas for transaction build/submit endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from poolkeeper.api.schemas.pool import QuoteResponse
from poolkeeper.domain.models import PendingAction


class BuildSwapRequest(BaseModel):
    """Request schema for building a swap."""

    pool_key: str = Field(..., description="Pool key, e.g. hUSD-hEUR")
    account_id: str = Field(..., description="Ledger account that sells and receives")
    from_symbol: str = Field(..., description="Token sold")
    to_symbol: str = Field(..., description="Token bought")
    amount: Decimal = Field(..., gt=0, description="Amount sold, in whole tokens")
    slippage_bps: Optional[int] = Field(default=None, ge=0, le=10_000)


class BuildLiquidityAddRequest(BaseModel):
    """Request schema for building a deposit."""

    pool_key: str
    account_id: str
    amount_a: Decimal = Field(..., gt=0, description="Token A deposit, in whole tokens")
    amount_b: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Token B deposit; matched to the reserve ratio when omitted",
    )


class BuildLiquidityRemoveRequest(BaseModel):
    """Request schema for building a withdrawal."""

    pool_key: str
    account_id: str
    percent: Optional[Decimal] = Field(default=None, gt=0, le=100)
    units: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def exactly_one_size(self):
        if (self.percent is None) == (self.units is None):
            raise ValueError("Provide exactly one of percent or units")
        return self


class BuildResponse(BaseModel):
    """Unsigned transaction for the external signer."""

    pending_id: str
    action: PendingAction
    pool_key: str
    account_id: str
    transaction_id: str
    tx_bytes_base64: str
    expires_at: datetime
    amounts: dict[str, int]
    quote: Optional[QuoteResponse] = None


class SubmitRequest(BaseModel):
    """Request schema for submitting signed bytes."""

    pending_id: str
    signed_tx_base64: str


class SubmitResponse(BaseModel):
    pending_id: str
    action: PendingAction
    status: str
    transaction_id: str
    pool_key: str
    account_id: str


class PendingResponse(BaseModel):
    """Pending entry as recorded at build time."""

    model_config = {"from_attributes": True}

    pending_id: str
    action: PendingAction
    account_id: str
    pool_key: str
    pool_account_id: str
    transaction_id: str
    created_at: datetime
    expires_at: datetime
    token_in_id: Optional[str] = None
    token_out_id: Optional[str] = None
    amount_in_units: int
    amount_out_units: int
    min_out_units: int
    token_a_id: Optional[str] = None
    token_b_id: Optional[str] = None
    amount_a_units: int
    amount_b_units: int
    mint_units: int
    burn_units: int
    fee_bps: int
    slippage_bps: int
