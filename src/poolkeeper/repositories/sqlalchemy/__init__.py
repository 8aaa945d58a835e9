"""SQLAlchemy repository implementations."""

from poolkeeper.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    reset_database,
    atomic,
    Base,
)
from poolkeeper.repositories.sqlalchemy.pool_repo import SqlAlchemyPoolRepository
from poolkeeper.repositories.sqlalchemy.liquidity_repo import SqlAlchemyLiquidityRepository
from poolkeeper.repositories.sqlalchemy.pending_repo import SqlAlchemyPendingRepository
from poolkeeper.repositories.sqlalchemy.faucet_repo import SqlAlchemyFaucetRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "reset_database",
    "atomic",
    "Base",
    "SqlAlchemyPoolRepository",
    "SqlAlchemyLiquidityRepository",
    "SqlAlchemyPendingRepository",
    "SqlAlchemyFaucetRepository",
]
