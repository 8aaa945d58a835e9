"""Service layer - business logic orchestration."""

from poolkeeper.services.reserve_cache import ReserveCache
from poolkeeper.services.liquidity_ledger import LiquidityLedger
from poolkeeper.services.pending_store import PendingStore
from poolkeeper.services.pool_registry import PoolRegistryService
from poolkeeper.services.coordinator import TransactionCoordinator
from poolkeeper.services.faucet_gate import FaucetGate

__all__ = [
    "ReserveCache",
    "LiquidityLedger",
    "PendingStore",
    "PoolRegistryService",
    "TransactionCoordinator",
    "FaucetGate",
]
