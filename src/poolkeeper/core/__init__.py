"""Core utilities and shared functionality."""

from poolkeeper.core.timing import (
    now_utc,
    to_utc,
    to_naive_utc,
    to_epoch_ms,
    from_epoch_ms,
    UTC,
    MillisecondStamper,
)
from poolkeeper.core.exceptions import (
    AppError,
    ValidationError,
    StateError,
    InsufficientUnitsError,
    NotFoundError,
    LedgerError,
    IntegrityError,
    CooldownError,
    NotAssociatedError,
)

__all__ = [
    "now_utc",
    "to_utc",
    "to_naive_utc",
    "to_epoch_ms",
    "from_epoch_ms",
    "UTC",
    "MillisecondStamper",
    "AppError",
    "ValidationError",
    "StateError",
    "InsufficientUnitsError",
    "NotFoundError",
    "LedgerError",
    "IntegrityError",
    "CooldownError",
    "NotAssociatedError",
]
