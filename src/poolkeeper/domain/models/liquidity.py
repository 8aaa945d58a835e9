"""Liquidity ownership models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class LiquidityPosition:
    """
    Ownership units one account holds in one pool.

    Units are a claim on a proportional share of both reserves, not a
    separate balance. Deposited totals are cumulative and never decrease.
    """

    account_id: str
    pool_key: str
    deposited_a_units: int = 0
    deposited_b_units: int = 0
    units: int = 0
    updated_at: Optional[datetime] = field(default=None)


@dataclass
class PoolTotals:
    """Units minted minus units burned for a pool."""

    pool_key: str
    total_units: int = 0
    updated_at: Optional[datetime] = field(default=None)
