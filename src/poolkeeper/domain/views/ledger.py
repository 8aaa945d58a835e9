"""View models for service outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from poolkeeper.domain.models import PendingAction, Pool


@dataclass(frozen=True)
class Reserves:
    """Pool balances as last observed on the remote ledger."""

    reserve_a: int
    reserve_b: int
    observed_at: Optional[datetime] = None

    @property
    def seeded(self) -> bool:
        return self.reserve_a > 0 and self.reserve_b > 0


@dataclass
class PoolStateView:
    """Pool registry entry with current reserves."""

    pool: Pool
    reserves: Reserves
    total_units: int = 0


@dataclass
class SwapQuote:
    """Result of pricing a swap."""

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
    reserves: Reserves


@dataclass
class BuildResult:
    """Unsigned transaction handed to the external signer."""

    pending_id: str
    action: PendingAction
    pool_key: str
    account_id: str
    transaction_id: str
    tx_bytes: bytes
    expires_at: datetime
    amounts: dict[str, int] = field(default_factory=dict)
    quote: Optional[SwapQuote] = None


@dataclass
class SubmitResult:
    """Confirmed submission."""

    pending_id: str
    action: PendingAction
    status: str
    transaction_id: str
    pool_key: str
    account_id: str


@dataclass
class PositionView:
    """Liquidity position with what it would withdraw at current reserves."""

    account_id: str
    pool_key: str
    deposited_a_units: int
    deposited_b_units: int
    units: int
    total_units: int
    estimate_a_units: int
    estimate_b_units: int
    deposited_a: Decimal = field(default_factory=lambda: Decimal("0"))
    deposited_b: Decimal = field(default_factory=lambda: Decimal("0"))
    estimate_a: Decimal = field(default_factory=lambda: Decimal("0"))
    estimate_b: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class TotalsCheck:
    """Stored pool total compared against the sum of positions."""

    pool_key: str
    stored_total: int
    positions_sum: int

    @property
    def drift(self) -> int:
        return self.stored_total - self.positions_sum

    @property
    def consistent(self) -> bool:
        return self.drift == 0


@dataclass
class FaucetTransfer:
    symbol: str
    token_id: str
    amount_units: int
    amount_tokens: Decimal


@dataclass
class FaucetStatusView:
    account_id: str
    can_claim: bool
    remaining_ms: int
    cooldown_ms: int
    next_claim_at_ms: Optional[int]
    amount_tokens: int
    tokens: list[dict] = field(default_factory=list)
    not_associated: list[dict] = field(default_factory=list)


@dataclass
class FaucetClaimResult:
    account_id: str
    status: str
    transaction_id: str
    claimed_at_ms: int
    next_claim_at_ms: int
    transfers: list[FaucetTransfer] = field(default_factory=list)
