"""SQLAlchemy implementation of FaucetRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from poolkeeper.core.timing import to_naive_utc, to_utc
from poolkeeper.domain.models import FaucetClaim
from poolkeeper.repositories.sqlalchemy.orm_models import FaucetClaimORM


class SqlAlchemyFaucetRepository:
    """SQLAlchemy-backed faucet claim timestamps."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, account_id: str) -> Optional[FaucetClaim]:
        """Get the last claim for an account."""
        orm_claim = self._db.get(FaucetClaimORM, account_id, populate_existing=True)
        return self._to_domain(orm_claim) if orm_claim else None

    def upsert(self, claim: FaucetClaim) -> FaucetClaim:
        """Record a claim."""
        orm_claim = self._db.get(FaucetClaimORM, claim.account_id)
        if orm_claim:
            orm_claim.last_claim_at = to_naive_utc(claim.last_claim_at)
        else:
            orm_claim = FaucetClaimORM(
                account_id=claim.account_id,
                last_claim_at=to_naive_utc(claim.last_claim_at),
            )
            self._db.add(orm_claim)
        self._db.flush()
        return self._to_domain(orm_claim)

    @staticmethod
    def _to_domain(orm: FaucetClaimORM) -> FaucetClaim:
        return FaucetClaim(account_id=orm.account_id, last_claim_at=to_utc(orm.last_claim_at))
