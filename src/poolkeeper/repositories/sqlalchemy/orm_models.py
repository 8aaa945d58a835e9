"""SQLAlchemy ORM model definitions."""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from poolkeeper.core.timing import now_utc, to_naive_utc
from poolkeeper.repositories.sqlalchemy.database import Base
from poolkeeper.domain.models.enums import PendingAction


def _utcnow():
    return to_naive_utc(now_utc())


class TokenORM(Base):
    """SQLAlchemy model for Token."""

    __tablename__ = "tokens"

    symbol = Column(String(32), primary_key=True)
    token_id = Column(String(64), unique=True, nullable=False)
    decimals = Column(Integer, nullable=False, default=6)


class PoolORM(Base):
    """SQLAlchemy model for Pool."""

    __tablename__ = "pools"

    pool_key = Column(String(64), primary_key=True)
    pool_account_id = Column(String(64), nullable=False)
    token_a_symbol = Column(String(32), ForeignKey("tokens.symbol"), nullable=False)
    token_b_symbol = Column(String(32), ForeignKey("tokens.symbol"), nullable=False)
    fee_bps = Column(Integer, nullable=False, default=30)

    token_a = relationship("TokenORM", foreign_keys=[token_a_symbol], lazy="joined")
    token_b = relationship("TokenORM", foreign_keys=[token_b_symbol], lazy="joined")


class LiquidityPositionORM(Base):
    """SQLAlchemy model for LiquidityPosition."""

    __tablename__ = "liquidity_positions"

    account_id = Column(String(64), primary_key=True)
    pool_key = Column(String(64), ForeignKey("pools.pool_key"), primary_key=True)
    deposited_a_units = Column(BigInteger, nullable=False, default=0)
    deposited_b_units = Column(BigInteger, nullable=False, default=0)
    units = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=True, default=_utcnow, onupdate=_utcnow)


class PoolTotalsORM(Base):
    """SQLAlchemy model for PoolTotals."""

    __tablename__ = "pool_totals"

    pool_key = Column(String(64), ForeignKey("pools.pool_key"), primary_key=True)
    total_units = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=True, default=_utcnow, onupdate=_utcnow)


class PendingTransactionORM(Base):
    """SQLAlchemy model for PendingTransaction."""

    __tablename__ = "pending_transactions"

    pending_id = Column(String(255), primary_key=True)
    action = Column(SqlEnum(PendingAction), nullable=False)
    account_id = Column(String(64), nullable=False)
    pool_key = Column(String(64), nullable=False)
    pool_account_id = Column(String(64), nullable=False)
    transaction_id = Column(String(128), nullable=False)
    body_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    token_in_id = Column(String(64), nullable=True)
    token_out_id = Column(String(64), nullable=True)
    amount_in_units = Column(BigInteger, nullable=False, default=0)
    amount_out_units = Column(BigInteger, nullable=False, default=0)
    min_out_units = Column(BigInteger, nullable=False, default=0)
    token_a_id = Column(String(64), nullable=True)
    token_b_id = Column(String(64), nullable=True)
    amount_a_units = Column(BigInteger, nullable=False, default=0)
    amount_b_units = Column(BigInteger, nullable=False, default=0)
    mint_units = Column(BigInteger, nullable=False, default=0)
    burn_units = Column(BigInteger, nullable=False, default=0)
    fee_bps = Column(Integer, nullable=False, default=0)
    slippage_bps = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_pending_expires_at", "expires_at"),
        Index("ix_pending_account", "account_id"),
    )


class FaucetClaimORM(Base):
    """SQLAlchemy model for FaucetClaim."""

    __tablename__ = "faucet_claims"

    account_id = Column(String(64), primary_key=True)
    last_claim_at = Column(DateTime, nullable=False)
