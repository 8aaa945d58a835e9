"""API routers package."""

from poolkeeper.api.routers.pools import router as pools_router
from poolkeeper.api.routers.tx import router as tx_router
from poolkeeper.api.routers.liquidity import router as liquidity_router
from poolkeeper.api.routers.faucet import router as faucet_router

__all__ = [
    "pools_router",
    "tx_router",
    "liquidity_router",
    "faucet_router",
]
