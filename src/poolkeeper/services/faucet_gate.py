"""Cooldown-gated test token faucet."""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from poolkeeper.config.settings import Settings
from poolkeeper.core.exceptions import CooldownError, LedgerError, NotAssociatedError, ValidationError
from poolkeeper.core.keys import KeyStore
from poolkeeper.core.locks import KeyedLock
from poolkeeper.core.timing import MillisecondStamper, from_epoch_ms, now_utc, to_epoch_ms
from poolkeeper.core.transfer_tx import TransferTransaction
from poolkeeper.domain.models import FaucetClaim, Token
from poolkeeper.domain.pricing import to_tokens
from poolkeeper.domain.views import FaucetClaimResult, FaucetStatusView, FaucetTransfer
from poolkeeper.providers.ledger_provider import LedgerClient
from poolkeeper.providers.mirror_provider import MirrorProvider
from poolkeeper.repositories.protocols import FaucetRepository
from poolkeeper.repositories.sqlalchemy.database import atomic
from poolkeeper.services.coordinator import require_account_id
from poolkeeper.services.pool_registry import PoolRegistryService

logger = logging.getLogger(__name__)


class FaucetGate:
    """
    Hands out a fixed amount of every registry token, once per cooldown.

    A claim is a single operator-signed transfer from the treasury; there is
    no pending step. The cooldown only starts when the ledger confirms.
    """

    def __init__(
        self,
        faucet_repo: FaucetRepository,
        session: Session,
        registry: PoolRegistryService,
        mirror: MirrorProvider,
        ledger_client: LedgerClient,
        keys: KeyStore,
        locks: KeyedLock,
        stamper: MillisecondStamper,
        settings: Settings,
        clock: Callable = now_utc,
    ):
        self._repo = faucet_repo
        self._session = session
        self._registry = registry
        self._mirror = mirror
        self._ledger = ledger_client
        self._keys = keys
        self._locks = locks
        self._stamper = stamper
        self._settings = settings
        self._clock = clock

    @property
    def cooldown_ms(self) -> int:
        return self._settings.faucet_cooldown_ms

    def status(self, account_id: str) -> FaucetStatusView:
        account_id = require_account_id(account_id)
        now_ms = to_epoch_ms(self._clock())
        last_ms = self._last_claim_ms(account_id)
        remaining = self._remaining_ms(last_ms, now_ms)
        tokens = self._registry.list_tokens()
        return FaucetStatusView(
            account_id=account_id,
            can_claim=remaining == 0,
            remaining_ms=remaining,
            cooldown_ms=self.cooldown_ms,
            next_claim_at_ms=last_ms + self.cooldown_ms if last_ms is not None else None,
            amount_tokens=self._settings.faucet_amount_tokens,
            tokens=[
                {"symbol": t.symbol, "token_id": t.token_id, "decimals": t.decimals}
                for t in tokens
            ],
            not_associated=self._not_associated(account_id, tokens),
        )

    def claim(self, account_id: str) -> FaucetClaimResult:
        """
        Send the faucet amount of every token to `account_id`.

        Raises CooldownError inside the cooldown window and NotAssociatedError
        when the account cannot receive every token; neither starts a new
        cooldown.
        """
        account_id = require_account_id(account_id)
        with self._locks.hold(("faucet", account_id)):
            now = self._clock()
            now_ms = to_epoch_ms(now)
            last_ms = self._last_claim_ms(account_id)
            remaining = self._remaining_ms(last_ms, now_ms)
            if remaining > 0:
                raise CooldownError(account_id, remaining, last_ms + self.cooldown_ms)

            tokens = self._registry.list_tokens()
            if not tokens:
                raise ValidationError("No tokens are registered for the faucet")
            missing = self._not_associated(account_id, tokens)
            if missing:
                raise NotAssociatedError(account_id, missing)

            operator_id = self._settings.operator_id
            if not operator_id:
                raise ValidationError("Missing OPERATOR_ID. Check the environment or .env file.")
            tx = TransferTransaction.create(
                payer_account_id=operator_id,
                valid_start=from_epoch_ms(self._stamper.stamp(now)),
                memo=f"{self._settings.tx_memo_prefix}:faucet",
                max_fee=self._settings.faucet_max_transaction_fee,
                valid_duration_s=self._settings.tx_valid_duration_seconds,
            )
            transfers = []
            for token in tokens:
                amount_units = self._settings.faucet_amount_tokens * token.one
                tx.move(token.token_id, operator_id, account_id, amount_units)
                transfers.append(
                    FaucetTransfer(
                        symbol=token.symbol,
                        token_id=token.token_id,
                        amount_units=amount_units,
                        amount_tokens=to_tokens(amount_units, token.decimals),
                    )
                )
            tx.sign(self._keys.operator_key)

            receipt = self._ledger.submit(tx)
            if not receipt.succeeded:
                logger.warning("Faucet transfer to %s rejected: %s", account_id, receipt.status)
                raise LedgerError(
                    f"Faucet transfer status: {receipt.status}",
                    status=receipt.status,
                    transaction_id=receipt.transaction_id,
                )

            with atomic(self._session):
                self._repo.upsert(FaucetClaim(account_id=account_id, last_claim_at=now))
            logger.info("Faucet claim %s for %s", receipt.transaction_id, account_id)

            return FaucetClaimResult(
                account_id=account_id,
                status=receipt.status,
                transaction_id=receipt.transaction_id,
                claimed_at_ms=now_ms,
                next_claim_at_ms=now_ms + self.cooldown_ms,
                transfers=transfers,
            )

    def _last_claim_ms(self, account_id: str) -> Optional[int]:
        claim = self._repo.get(account_id)
        return to_epoch_ms(claim.last_claim_at) if claim else None

    def _remaining_ms(self, last_ms: Optional[int], now_ms: int) -> int:
        if last_ms is None:
            return 0
        return max(0, last_ms + self.cooldown_ms - now_ms)

    def _not_associated(self, account_id: str, tokens: list[Token]) -> list[dict]:
        associated = self._mirror.get_associated_token_ids(account_id)
        return [
            {"symbol": t.symbol, "token_id": t.token_id}
            for t in tokens
            if t.token_id not in associated
        ]
