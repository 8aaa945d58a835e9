"""In-memory ledger for offline operation and tests."""

import logging
import threading
from collections import deque
from typing import Callable

from poolkeeper.core.exceptions import ValidationError
from poolkeeper.core.timing import now_utc, to_epoch_ms
from poolkeeper.core.transfer_tx import TransferTransaction
from poolkeeper.domain.models import TxStatus
from poolkeeper.providers.ledger_provider import LedgerReceipt

logger = logging.getLogger(__name__)

# Tolerated drift between the service clock and the ledger clock.
START_SKEW_MS = 10_000


class StubLedger:
    """
    Ledger that keeps token balances in memory.

    Implements both MirrorProvider and LedgerClient. Submissions are checked
    the way the real ledger checks them: transaction id uniqueness, validity
    window, zero net per token, a verified signature from the payer and from
    every debited account, token association and sufficient balances.
    Accounts are mapped to signer addresses with `register_account`.
    """

    def __init__(self, clock: Callable = now_utc):
        self._clock = clock
        self._lock = threading.RLock()
        self._balances: dict[tuple[str, str], int] = {}
        self._associations: dict[str, set[str]] = {}
        self._signers: dict[str, str] = {}
        self._seen_ids: set[str] = set()
        self._forced: deque = deque()
        self.submissions: list[TransferTransaction] = []
        self.balance_reads = 0

    # -- setup ---------------------------------------------------------------

    def register_account(self, account_id: str, address: str) -> None:
        """Map an account to the address whose signature authorizes its debits."""
        with self._lock:
            self._signers[account_id] = address
            self._associations.setdefault(account_id, set())

    def associate(self, account_id: str, *token_ids: str) -> None:
        with self._lock:
            self._associations.setdefault(account_id, set()).update(token_ids)

    def credit(self, account_id: str, token_id: str, amount: int) -> None:
        """Mint `amount` into an account, associating it with the token."""
        with self._lock:
            self.associate(account_id, token_id)
            key = (account_id, token_id)
            self._balances[key] = self._balances.get(key, 0) + amount

    def force_next_status(self, status: TxStatus) -> None:
        """Make the next submission return `status` without applying it."""
        with self._lock:
            self._forced.append(status)

    # -- MirrorProvider ------------------------------------------------------

    def get_token_balance(self, account_id: str, token_id: str) -> int:
        with self._lock:
            self.balance_reads += 1
            return self._balances.get((account_id, token_id), 0)

    def get_associated_token_ids(self, account_id: str) -> set[str]:
        with self._lock:
            return set(self._associations.get(account_id, set()))

    # -- LedgerClient --------------------------------------------------------

    def submit(self, tx: TransferTransaction) -> LedgerReceipt:
        with self._lock:
            self.submissions.append(tx)
            status = self._check(tx)
            if status == TxStatus.SUCCESS:
                self._apply(tx)
                self._seen_ids.add(tx.transaction_id)
            else:
                logger.info("Stub ledger rejected %s: %s", tx.transaction_id, status.value)
            return LedgerReceipt(status=status.value, transaction_id=tx.transaction_id)

    def _check(self, tx: TransferTransaction) -> TxStatus:
        if self._forced:
            return self._forced.popleft()
        if tx.transaction_id in self._seen_ids:
            return TxStatus.DUPLICATE_TRANSACTION
        now_ms = to_epoch_ms(self._clock())
        if now_ms + START_SKEW_MS < tx.valid_start_ms or now_ms >= tx.expires_at_ms:
            return TxStatus.TRANSACTION_EXPIRED
        if any(net != 0 for net in tx.net_by_token().values()):
            return TxStatus.INVALID_ACCOUNT_AMOUNTS

        try:
            signers = {a.lower() for a in tx.signer_addresses()}
        except ValidationError:
            return TxStatus.INVALID_SIGNATURE
        for account_id in {tx.payer_account_id} | tx.debited_accounts():
            address = self._signers.get(account_id)
            if address is None or address.lower() not in signers:
                return TxStatus.INVALID_SIGNATURE

        for leg in tx.transfers:
            if leg.token_id not in self._associations.get(leg.account_id, set()):
                return TxStatus.TOKEN_NOT_ASSOCIATED_TO_ACCOUNT

        deltas: dict[tuple[str, str], int] = {}
        for leg in tx.transfers:
            key = (leg.account_id, leg.token_id)
            deltas[key] = deltas.get(key, 0) + leg.amount
        for key, delta in deltas.items():
            if self._balances.get(key, 0) + delta < 0:
                return TxStatus.INSUFFICIENT_TOKEN_BALANCE
        return TxStatus.SUCCESS

    def _apply(self, tx: TransferTransaction) -> None:
        for leg in tx.transfers:
            key = (leg.account_id, leg.token_id)
            self._balances[key] = self._balances.get(key, 0) + leg.amount

    def balance(self, account_id: str, token_id: str) -> int:
        with self._lock:
            return self._balances.get((account_id, token_id), 0)
