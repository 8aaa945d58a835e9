"""Faucet claim record."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class FaucetClaim:
    """Time of an account's last successful faucet claim."""

    account_id: str
    last_claim_at: datetime
