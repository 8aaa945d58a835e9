"""Dependency injection for FastAPI."""

from fastapi import Depends
from sqlalchemy.orm import Session

from poolkeeper.app_context import AppContext, get_app_context
from poolkeeper.repositories.sqlalchemy.database import get_db
from poolkeeper.services import (
    FaucetGate,
    LiquidityLedger,
    PendingStore,
    PoolRegistryService,
    TransactionCoordinator,
)


def get_context() -> AppContext:
    """Provide the process-wide AppContext."""
    return get_app_context()


def get_registry(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> PoolRegistryService:
    """Provide PoolRegistryService instance."""
    return context.registry(db)


def get_liquidity_ledger(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> LiquidityLedger:
    """Provide LiquidityLedger instance."""
    return context.liquidity(db)


def get_pending_store(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> PendingStore:
    """Provide PendingStore instance."""
    return context.pending(db)


def get_coordinator(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> TransactionCoordinator:
    """Provide TransactionCoordinator instance."""
    return context.coordinator(db)


def get_faucet_gate(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> FaucetGate:
    """Provide FaucetGate instance."""
    return context.faucet(db)
