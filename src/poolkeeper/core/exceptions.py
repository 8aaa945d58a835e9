"""Application-level exceptions."""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        """Extra fields merged into the error response body."""
        return {}


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class StateError(AppError):
    """Raised when pool or account state does not allow the request."""

    status_code = 409

    def __init__(self, message: str, code: str = "STATE_ERROR"):
        super().__init__(message, code=code)


class InsufficientUnitsError(StateError):
    """Raised when burning more liquidity units than an account holds."""

    def __init__(self, account_id: str, pool_key: str, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient liquidity units for {account_id} in {pool_key}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_UNITS",
        )


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str, reason: str = "not found"):
        super().__init__(f"{resource} {reason}: {identifier}", code="NOT_FOUND")


class LedgerError(AppError):
    """
    Raised when the ledger rejects a submission or a remote call fails.

    `retryable` is True for timeouts and connection failures, where the
    caller may try again. The service itself never retries.
    """

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        transaction_id: Optional[str] = None,
        retryable: bool = False,
    ):
        self.status = status
        self.transaction_id = transaction_id
        self.retryable = retryable
        super().__init__(message, code="LEDGER_ERROR")

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 503 if self.retryable else 502

    @property
    def details(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "transaction_id": self.transaction_id,
            "retryable": self.retryable,
        }


class IntegrityError(AppError):
    """Raised when an internal invariant is violated. Never corrected silently."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="INTEGRITY_ERROR")


class CooldownError(AppError):
    """Raised when a faucet claim arrives inside the cooldown window."""

    status_code = 429

    def __init__(self, account_id: str, remaining_ms: int, next_claim_at_ms: int):
        self.remaining_ms = remaining_ms
        self.next_claim_at_ms = next_claim_at_ms
        super().__init__(
            f"Faucet cooldown active for {account_id}: {remaining_ms} ms remaining",
            code="COOLDOWN",
        )

    @property
    def details(self) -> dict[str, Any]:
        return {
            "remaining_ms": self.remaining_ms,
            "next_claim_at_ms": self.next_claim_at_ms,
        }


class NotAssociatedError(AppError):
    """Raised when an account is not associated with every faucet token."""

    def __init__(self, account_id: str, missing: list[dict[str, str]]):
        self.missing = missing
        symbols = ", ".join(m["symbol"] for m in missing)
        super().__init__(
            f"Account {account_id} is not associated with: {symbols}. "
            "Associate the tokens in your wallet first, then claim again.",
            code="ACCOUNT_NOT_ASSOCIATED",
        )

    @property
    def details(self) -> dict[str, Any]:
        return {"not_associated": self.missing}
