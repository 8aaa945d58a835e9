"""Pending (built but unconfirmed) transaction model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from poolkeeper.domain.models.enums import PendingAction


@dataclass(frozen=True)
class PendingTransaction:
    """
    Snapshot of the amounts quoted when a transaction was built.

    Created at build time, deleted exactly once when its submission is
    confirmed, never modified. The amounts here are what gets applied to the
    liquidity ledger; nothing is re-quoted at submit time.
    """

    pending_id: str
    action: PendingAction
    account_id: str
    pool_key: str
    pool_account_id: str
    transaction_id: str
    body_hash: str
    created_at: datetime
    expires_at: datetime
    token_in_id: Optional[str] = None
    token_out_id: Optional[str] = None
    amount_in_units: int = 0
    amount_out_units: int = 0
    min_out_units: int = 0
    token_a_id: Optional[str] = None
    token_b_id: Optional[str] = None
    amount_a_units: int = 0
    amount_b_units: int = 0
    mint_units: int = 0
    burn_units: int = 0
    fee_bps: int = 0
    slippage_bps: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            object.__setattr__(self, "action", PendingAction(self.action))

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def make_pending_id(pool_key: str, account_id: str, action: PendingAction, created_ms: int) -> str:
    """Pending ids are `<pool>|<account>|<action>|<created ms>`."""
    return f"{pool_key}|{account_id}|{action.value}|{created_ms}"
