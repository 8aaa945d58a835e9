"""Enumerations for domain models."""

from enum import Enum


class PendingAction(str, Enum):
    """State-changing actions that go through the build/sign/submit lifecycle."""

    SWAP = "swap"
    LIQUIDITY_ADD = "liquidity_add"
    LIQUIDITY_REMOVE = "liquidity_remove"

    @property
    def changes_liquidity(self) -> bool:
        return self in (PendingAction.LIQUIDITY_ADD, PendingAction.LIQUIDITY_REMOVE)

    @property
    def requires_pool_signature(self) -> bool:
        """The pool account is debited, so its custodial key must sign."""
        return self in (PendingAction.SWAP, PendingAction.LIQUIDITY_REMOVE)


class SwapDirection(str, Enum):
    """Which side of a pool is sold."""

    A_TO_B = "A_TO_B"
    B_TO_A = "B_TO_A"


class TxStatus(str, Enum):
    """Receipt statuses this service distinguishes. Anything else is a failure."""

    SUCCESS = "SUCCESS"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INSUFFICIENT_TOKEN_BALANCE = "INSUFFICIENT_TOKEN_BALANCE"
    TOKEN_NOT_ASSOCIATED_TO_ACCOUNT = "TOKEN_NOT_ASSOCIATED_TO_ACCOUNT"
    DUPLICATE_TRANSACTION = "DUPLICATE_TRANSACTION"
    TRANSACTION_EXPIRED = "TRANSACTION_EXPIRED"
    INVALID_ACCOUNT_AMOUNTS = "INVALID_ACCOUNT_AMOUNTS"
