"""Pydantic schemas for pool and quote endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """Registry token."""

    model_config = {"from_attributes": True}

    symbol: str
    token_id: str
    decimals: int


class PoolResponse(BaseModel):
    """Registry pool without reserves."""

    pool_key: str
    pool_account_id: str
    token_a: TokenResponse
    token_b: TokenResponse
    fee_bps: int


class ReservesResponse(BaseModel):
    reserve_a: int
    reserve_b: int
    observed_at: Optional[datetime] = None


class PoolStateResponse(PoolResponse):
    """Pool with freshly read reserves."""

    reserves: ReservesResponse
    total_units: int


class QuoteResponse(BaseModel):
    """Swap quote."""

    pool_key: str
    from_symbol: str
    to_symbol: str
    token_in_id: str
    token_out_id: str
    fee_bps: int
    slippage_bps: int
    amount_in_units: int
    amount_out_units: int
    min_out_units: int
    amount_in: Decimal
    amount_out: Decimal
    min_out: Decimal
    reserves: ReservesResponse
