"""Ledger submission protocol and HTTP gateway client."""

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from poolkeeper.core.exceptions import LedgerError
from poolkeeper.core.transfer_tx import TransferTransaction
from poolkeeper.domain.models import TxStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerReceipt:
    """Outcome of a submission. Only `SUCCESS` is a success."""

    status: str
    transaction_id: str

    @property
    def succeeded(self) -> bool:
        return self.status == TxStatus.SUCCESS.value


class LedgerClient(Protocol):
    """Submits fully signed transactions and returns the receipt."""

    def submit(self, tx: TransferTransaction) -> LedgerReceipt:
        ...


class GatewayLedgerClient:
    """
    Submits transactions to an HTTP gateway in front of the ledger SDK.

    POST `{base_url}/transactions` with `{"transactionBytes": <base64>}`;
    the gateway answers `{"status": ..., "transactionId": ...}` once the
    receipt is available.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def submit(self, tx: TransferTransaction) -> LedgerReceipt:
        payload = {"transactionBytes": base64.b64encode(tx.to_bytes()).decode("ascii")}
        try:
            response = self._session.post(
                f"{self._base_url}/transactions",
                json=payload,
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as exc:
            # The receipt is unknown; the transaction may still reach consensus.
            logger.warning("Ledger submission timed out: %s", tx.transaction_id)
            raise LedgerError(
                "Ledger submission timed out",
                transaction_id=tx.transaction_id,
                retryable=True,
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("Ledger submission failed: %s (%s)", tx.transaction_id, exc)
            raise LedgerError(
                f"Ledger submission failed: {exc}",
                transaction_id=tx.transaction_id,
                retryable=True,
            ) from exc

        if not response.ok:
            raise LedgerError(
                f"Ledger gateway error {response.status_code}: {response.text[:200]}",
                status=str(response.status_code),
                transaction_id=tx.transaction_id,
                retryable=response.status_code >= 500,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise LedgerError(
                "Ledger gateway returned invalid JSON",
                transaction_id=tx.transaction_id,
            ) from exc
        return LedgerReceipt(
            status=str(data.get("status", "UNKNOWN")),
            transaction_id=str(data.get("transactionId") or tx.transaction_id),
        )
