"""PoolKeeper: off-chain control plane for constant-product liquidity pools."""

__version__ = "0.1.0"
