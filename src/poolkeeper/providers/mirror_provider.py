"""Remote ledger query service (mirror) protocol and HTTP implementation."""

import logging
from typing import Optional, Protocol

import requests

from poolkeeper.core.exceptions import LedgerError

logger = logging.getLogger(__name__)


class MirrorProvider(Protocol):
    """
    Read-only view of on-ledger token balances.

    Eventually consistent with the ledger; staleness is expected.
    """

    def get_token_balance(self, account_id: str, token_id: str) -> int:
        """Balance in smallest units. Unassociated tokens read as 0."""
        ...

    def get_associated_token_ids(self, account_id: str) -> set[str]:
        """Token ids the account is associated with."""
        ...


class MirrorNodeProvider:
    """
    Mirror node REST client.

    Reads `/api/v1/accounts/{id}/tokens`, following `links.next` pages.
    Timeouts and connection failures surface as retryable LedgerErrors.
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

    def get_token_balance(self, account_id: str, token_id: str) -> int:
        for row in self._iter_tokens(account_id):
            if row.get("token_id") == token_id:
                return int(row.get("balance") or 0)
        return 0

    def get_associated_token_ids(self, account_id: str) -> set[str]:
        return {row["token_id"] for row in self._iter_tokens(account_id) if row.get("token_id")}

    def _iter_tokens(self, account_id: str):
        path: Optional[str] = f"/api/v1/accounts/{account_id}/tokens?limit=100"
        while path:
            data = self._get(path)
            yield from data.get("tokens") or []
            path = (data.get("links") or {}).get("next")

    def _get(self, path: str) -> dict:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            logger.warning("Mirror read timed out: %s", path)
            raise LedgerError(f"Mirror read timed out: {path}", retryable=True) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("Mirror read failed: %s (%s)", path, exc)
            raise LedgerError(f"Mirror read failed: {exc}", retryable=True) from exc

        if not response.ok:
            raise LedgerError(
                f"Mirror GET failed {response.status_code}: {response.text[:200]}",
                status=str(response.status_code),
                retryable=response.status_code >= 500,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise LedgerError(f"Mirror returned invalid JSON for {path}") from exc
