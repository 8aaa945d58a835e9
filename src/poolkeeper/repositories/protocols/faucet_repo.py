"""Faucet claim repository protocol."""

from typing import Protocol, Optional

from poolkeeper.domain.models import FaucetClaim


class FaucetRepository(Protocol):
    """Interface for faucet claim timestamps."""

    def get(self, account_id: str) -> Optional[FaucetClaim]:
        """Get the last claim for an account."""
        ...

    def upsert(self, claim: FaucetClaim) -> FaucetClaim:
        """Record a claim."""
        ...
