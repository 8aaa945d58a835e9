"""Pydantic schemas for liquidity endpoints."""

from decimal import Decimal

from pydantic import BaseModel


class PositionResponse(BaseModel):
    """Liquidity position with a full-withdrawal estimate."""

    model_config = {"from_attributes": True}

    account_id: str
    pool_key: str
    deposited_a_units: int
    deposited_b_units: int
    units: int
    total_units: int
    estimate_a_units: int
    estimate_b_units: int
    deposited_a: Decimal
    deposited_b: Decimal
    estimate_a: Decimal
    estimate_b: Decimal


class TotalsCheckResponse(BaseModel):
    pool_key: str
    stored_total: int
    positions_sum: int
    drift: int
    consistent: bool
