"""Transaction lifecycle: quote, build, external signature, submit, apply."""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from sqlalchemy.orm import Session

from poolkeeper.config.settings import Settings
from poolkeeper.core.exceptions import (
    AppError,
    IntegrityError,
    InsufficientUnitsError,
    LedgerError,
    StateError,
    ValidationError,
)
from poolkeeper.core.keys import KeyStore
from poolkeeper.core.locks import KeyedLock
from poolkeeper.core.timing import MillisecondStamper, from_epoch_ms, now_utc
from poolkeeper.core.transfer_tx import TransferTransaction
from poolkeeper.domain import pricing
from poolkeeper.domain.models import PendingAction, PendingTransaction, Pool, make_pending_id
from poolkeeper.domain.views import (
    BuildResult,
    PoolStateView,
    PositionView,
    Reserves,
    SubmitResult,
    SwapQuote,
)
from poolkeeper.providers.ledger_provider import LedgerClient
from poolkeeper.repositories.sqlalchemy.database import atomic
from poolkeeper.services.liquidity_ledger import LiquidityLedger
from poolkeeper.services.pending_store import PendingStore
from poolkeeper.services.pool_registry import PoolRegistryService
from poolkeeper.services.reserve_cache import ReserveCache

logger = logging.getLogger(__name__)

_ACCOUNT_ID = re.compile(r"^\d+\.\d+\.\d+$")


def require_account_id(account_id: Optional[str]) -> str:
    """Validate a `shard.realm.num` ledger account id."""
    value = (account_id or "").strip()
    if not value:
        raise ValidationError("Missing account id")
    if not _ACCOUNT_ID.match(value):
        raise ValidationError(f"Invalid account id: {value}")
    return value


def require_bps(value: Optional[int], default: int, name: str) -> int:
    bps = default if value is None else int(value)
    if not 0 <= bps <= pricing.BPS_DENOMINATOR:
        raise ValidationError(f"{name} must be within 0..{pricing.BPS_DENOMINATOR}")
    return bps


def require_positive_amount(amount, name: str = "amount") -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid {name}: {amount}") from e
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"{name} must be > 0")
    return value


def require_units_within_limit(units: int, name: str) -> int:
    if units > pricing.MAX_UNITS:
        raise ValidationError(f"{name} exceeds the ledger amount limit of {pricing.MAX_UNITS} units")
    return units


class TransactionCoordinator:
    """
    Orchestrates every state-changing pool action.

    Builds re-read reserves with ttl 0, price the action, record a pending
    entry with the exact amounts and return unsigned bytes. Submits verify
    the signed bytes match what was built, add the service's signatures,
    submit, and on success consume the pending entry and apply its effect to
    the liquidity ledger in one database transaction, then invalidate the
    pool's cached reserves. A rejected submission changes nothing.
    """

    def __init__(
        self,
        registry: PoolRegistryService,
        reserve_cache: ReserveCache,
        liquidity: LiquidityLedger,
        pending: PendingStore,
        ledger_client: LedgerClient,
        keys: KeyStore,
        locks: KeyedLock,
        stamper: MillisecondStamper,
        session: Session,
        settings: Settings,
        clock: Callable = now_utc,
    ):
        self._registry = registry
        self._cache = reserve_cache
        self._liquidity = liquidity
        self._pending = pending
        self._ledger = ledger_client
        self._keys = keys
        self._locks = locks
        self._stamper = stamper
        self._session = session
        self._settings = settings
        self._clock = clock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def pool_state(self, pool_key: str) -> PoolStateView:
        """Pool with freshly read reserves and issued units."""
        pool = self._registry.get_pool(pool_key)
        return PoolStateView(
            pool=pool,
            reserves=self._cache.get(pool, 0),
            total_units=self._liquidity.get_total_units(pool_key),
        )

    def quote_swap(
        self,
        pool_key: str,
        from_symbol: str,
        to_symbol: str,
        amount,
        fee_bps: Optional[int] = None,
        slippage_bps: Optional[int] = None,
        ttl_ms: Optional[int] = None,
    ) -> SwapQuote:
        """
        Price a swap without building it.

        Reserves come from the cache with the configured TTL. A fee override
        only affects this quote; builds always charge the pool's fee. An
        unseeded pool quotes an output of 0.
        """
        pool = self._registry.get_pool(pool_key)
        ttl = self._settings.reserve_cache_ttl_ms if ttl_ms is None else ttl_ms
        reserves = self._cache.get(pool, ttl)
        return self._price_swap(
            pool,
            from_symbol,
            to_symbol,
            require_positive_amount(amount),
            require_bps(fee_bps, pool.fee_bps, "fee_bps"),
            require_bps(slippage_bps, self._settings.default_slippage_bps, "slippage_bps"),
            reserves,
        )

    def get_position(self, account_id: str, pool_key: str) -> PositionView:
        """Position with what a full withdrawal would return at current reserves."""
        account_id = require_account_id(account_id)
        pool = self._registry.get_pool(pool_key)
        position = self._liquidity.get_position(account_id, pool_key)
        total_units = self._liquidity.get_total_units(pool_key)
        reserves = self._cache.get(pool, 0)
        out_a, out_b = pricing.quote_burn_amounts(
            position.units, reserves.reserve_a, reserves.reserve_b, total_units
        )
        dec_a = pool.token_a.decimals
        dec_b = pool.token_b.decimals
        return PositionView(
            account_id=account_id,
            pool_key=pool_key,
            deposited_a_units=position.deposited_a_units,
            deposited_b_units=position.deposited_b_units,
            units=position.units,
            total_units=total_units,
            estimate_a_units=out_a,
            estimate_b_units=out_b,
            deposited_a=pricing.to_tokens(position.deposited_a_units, dec_a),
            deposited_b=pricing.to_tokens(position.deposited_b_units, dec_b),
            estimate_a=pricing.to_tokens(out_a, dec_a),
            estimate_b=pricing.to_tokens(out_b, dec_b),
        )

    def get_pending(self, pending_id: str) -> PendingTransaction:
        return self._pending.get(pending_id)

    # -------------------------------------------------------------------------
    # Builds
    # -------------------------------------------------------------------------

    def build_swap(
        self,
        pool_key: str,
        account_id: str,
        from_symbol: str,
        to_symbol: str,
        amount,
        slippage_bps: Optional[int] = None,
    ) -> BuildResult:
        """Build an exact-in swap: account pays token_in, pool pays token_out."""
        account_id = require_account_id(account_id)
        amount = require_positive_amount(amount)
        slippage = require_bps(slippage_bps, self._settings.default_slippage_bps, "slippage_bps")
        pool = self._registry.get_pool(pool_key)
        self._pending.evict_expired()

        reserves = self._cache.get(pool, 0)
        quote = self._price_swap(
            pool, from_symbol, to_symbol, amount, pool.fee_bps, slippage, reserves
        )
        if not reserves.seeded:
            raise StateError(f"Pool {pool.pool_key} is not seeded (zero reserves)")
        if quote.amount_out_units <= 0:
            raise StateError("Swap output rounds to zero")
        reserve_out = reserves.reserve_b if quote.token_in_id == pool.token_a.token_id else reserves.reserve_a
        if quote.amount_out_units > reserve_out:
            raise StateError("Pool has insufficient output reserve")

        tx = self._new_transaction(f"swap:{pool.pool_key}")
        tx.move(quote.token_in_id, account_id, pool.pool_account_id, quote.amount_in_units)
        tx.move(quote.token_out_id, pool.pool_account_id, account_id, quote.amount_out_units)

        entry = self._record(
            tx,
            PendingAction.SWAP,
            pool,
            account_id,
            token_in_id=quote.token_in_id,
            token_out_id=quote.token_out_id,
            amount_in_units=quote.amount_in_units,
            amount_out_units=quote.amount_out_units,
            min_out_units=quote.min_out_units,
            fee_bps=quote.fee_bps,
            slippage_bps=quote.slippage_bps,
        )
        return self._build_result(
            entry,
            tx,
            {
                "amount_in_units": quote.amount_in_units,
                "amount_out_units": quote.amount_out_units,
                "min_out_units": quote.min_out_units,
            },
            quote=quote,
        )

    def build_liquidity_add(
        self,
        pool_key: str,
        account_id: str,
        amount_a,
        amount_b=None,
    ) -> BuildResult:
        """
        Build a two-sided deposit.

        Without `amount_b` the B side is matched to the current reserve
        ratio, which needs a seeded pool. With both amounts an empty pool
        can be seeded; later deposits off the ratio mint the smaller claim.
        """
        account_id = require_account_id(account_id)
        pool = self._registry.get_pool(pool_key)
        amount_a_units = pricing.to_units(require_positive_amount(amount_a, "amount_a"), pool.token_a.decimals)
        require_units_within_limit(amount_a_units, "amount_a")
        if amount_a_units <= 0:
            raise ValidationError("amount_a is below the token's smallest unit")
        self._pending.evict_expired()

        reserves = self._cache.get(pool, 0)
        if amount_b is None:
            if not reserves.seeded:
                raise StateError(
                    f"Pool {pool.pool_key} is not seeded; amount_b is required for the first deposit"
                )
            amount_b_units = pricing.paired_amount(amount_a_units, reserves.reserve_a, reserves.reserve_b)
        else:
            amount_b_units = pricing.to_units(
                require_positive_amount(amount_b, "amount_b"), pool.token_b.decimals
            )
        if amount_b_units <= 0:
            raise StateError("amount_b rounds to zero")
        require_units_within_limit(amount_b_units, "amount_b")

        total_units = self._liquidity.get_total_units(pool.pool_key)
        mint_units = pricing.quote_mint_units(
            amount_a_units, amount_b_units, reserves.reserve_a, reserves.reserve_b, total_units
        )
        if mint_units <= 0:
            raise StateError("Deposit mints zero liquidity units")
        require_units_within_limit(mint_units, "mint_units")

        tx = self._new_transaction(f"liq:add:{pool.pool_key}")
        tx.move(pool.token_a.token_id, account_id, pool.pool_account_id, amount_a_units)
        tx.move(pool.token_b.token_id, account_id, pool.pool_account_id, amount_b_units)

        entry = self._record(
            tx,
            PendingAction.LIQUIDITY_ADD,
            pool,
            account_id,
            token_a_id=pool.token_a.token_id,
            token_b_id=pool.token_b.token_id,
            amount_a_units=amount_a_units,
            amount_b_units=amount_b_units,
            mint_units=mint_units,
        )
        return self._build_result(
            entry,
            tx,
            {
                "amount_a_units": amount_a_units,
                "amount_b_units": amount_b_units,
                "mint_units": mint_units,
            },
        )

    def build_liquidity_remove(
        self,
        pool_key: str,
        account_id: str,
        percent=None,
        units: Optional[int] = None,
    ) -> BuildResult:
        """Build a proportional withdrawal for `percent` of the position or explicit `units`."""
        account_id = require_account_id(account_id)
        pool = self._registry.get_pool(pool_key)
        if (percent is None) == (units is None):
            raise ValidationError("Provide exactly one of percent or units")
        self._pending.evict_expired()

        position = self._liquidity.get_position(account_id, pool.pool_key)
        if position.units <= 0:
            raise StateError(f"No liquidity position for {account_id} in {pool.pool_key}")
        if percent is not None:
            pct = require_positive_amount(percent, "percent")
            if pct > 100:
                raise ValidationError("percent must be within (0, 100]")
            burn_units = pricing.burn_units_for_percent(position.units, pct)
        else:
            burn_units = int(units)
            if burn_units <= 0:
                raise ValidationError("units must be > 0")
        if burn_units <= 0:
            raise StateError("Burn rounds to zero units")
        if burn_units > position.units:
            raise InsufficientUnitsError(account_id, pool.pool_key, burn_units, position.units)

        total_units = self._liquidity.get_total_units(pool.pool_key)
        if total_units <= 0:
            raise IntegrityError(f"Pool {pool.pool_key} has positions but no issued units")

        reserves = self._cache.get(pool, 0)
        if not reserves.seeded:
            raise StateError(f"Pool {pool.pool_key} is not seeded (zero reserves)")
        out_a, out_b = pricing.quote_burn_amounts(
            burn_units, reserves.reserve_a, reserves.reserve_b, total_units
        )
        if out_a <= 0 or out_b <= 0:
            raise StateError("Withdrawal amounts round to zero")

        tx = self._new_transaction(f"liq:remove:{pool.pool_key}")
        tx.move(pool.token_a.token_id, pool.pool_account_id, account_id, out_a)
        tx.move(pool.token_b.token_id, pool.pool_account_id, account_id, out_b)

        entry = self._record(
            tx,
            PendingAction.LIQUIDITY_REMOVE,
            pool,
            account_id,
            token_a_id=pool.token_a.token_id,
            token_b_id=pool.token_b.token_id,
            amount_a_units=out_a,
            amount_b_units=out_b,
            burn_units=burn_units,
        )
        return self._build_result(
            entry,
            tx,
            {"burn_units": burn_units, "amount_a_units": out_a, "amount_b_units": out_b},
        )

    # -------------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------------

    def submit(self, pending_id: str, signed_tx_bytes: bytes) -> SubmitResult:
        """
        Countersign and submit externally signed bytes, then apply the
        recorded effect once the ledger confirms.

        A non-success receipt raises LedgerError and keeps the pending entry
        so the client may retry. A consumed or expired entry raises
        NotFoundError before anything is sent.
        """
        with self._locks.hold(("pending", pending_id)):
            entry = self._pending.get(pending_id)
            tx = TransferTransaction.from_bytes(signed_tx_bytes)
            if tx.body_hash() != entry.body_hash:
                raise ValidationError("Signed transaction does not match the built transaction")
            tx.verify_signatures()

            if entry.action.changes_liquidity:
                with self._locks.hold(("liquidity", entry.account_id, entry.pool_key)):
                    return self._submit_locked(entry, tx)
            return self._submit_locked(entry, tx)

    def _submit_locked(self, entry: PendingTransaction, tx: TransferTransaction) -> SubmitResult:
        if entry.action == PendingAction.LIQUIDITY_REMOVE:
            available = self._liquidity.get_position(entry.account_id, entry.pool_key).units
            if available < entry.burn_units:
                raise InsufficientUnitsError(
                    entry.account_id, entry.pool_key, entry.burn_units, available
                )

        if entry.action.requires_pool_signature or self._keys.has_pool_key(entry.pool_key):
            tx.sign(self._keys.pool_key(entry.pool_key))
        tx.sign(self._keys.operator_key)

        receipt = self._ledger.submit(tx)
        if not receipt.succeeded:
            logger.warning(
                "Ledger rejected %s for pending %s: %s",
                receipt.transaction_id,
                entry.pending_id,
                receipt.status,
            )
            raise LedgerError(
                f"Transaction status: {receipt.status}",
                status=receipt.status,
                transaction_id=receipt.transaction_id,
            )

        try:
            with atomic(self._session):
                self._pending.consume(entry.pending_id)
                if entry.action == PendingAction.LIQUIDITY_ADD:
                    self._liquidity.apply_add(
                        entry.account_id,
                        entry.pool_key,
                        entry.amount_a_units,
                        entry.amount_b_units,
                        entry.mint_units,
                    )
                elif entry.action == PendingAction.LIQUIDITY_REMOVE:
                    self._liquidity.apply_remove(entry.account_id, entry.pool_key, entry.burn_units)
        except AppError as e:
            logger.critical(
                "Ledger confirmed %s but applying pending %s failed: %s",
                receipt.transaction_id,
                entry.pending_id,
                e.message,
            )
            raise IntegrityError(
                f"Transaction {receipt.transaction_id} succeeded but its effect could not be applied: {e.message}"
            ) from e
        finally:
            self._cache.invalidate(entry.pool_key)

        logger.info(
            "Confirmed %s %s for %s in %s",
            entry.action.value,
            receipt.transaction_id,
            entry.account_id,
            entry.pool_key,
        )
        return SubmitResult(
            pending_id=entry.pending_id,
            action=entry.action,
            status=receipt.status,
            transaction_id=receipt.transaction_id,
            pool_key=entry.pool_key,
            account_id=entry.account_id,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _price_swap(
        self,
        pool: Pool,
        from_symbol: str,
        to_symbol: str,
        amount: Decimal,
        fee_bps: int,
        slippage_bps: int,
        reserves: Reserves,
    ) -> SwapQuote:
        direction = self._registry.resolve_direction(pool, from_symbol, to_symbol)
        token_in, token_out = pool.tokens_for(direction)
        if token_in == pool.token_a:
            reserve_in, reserve_out = reserves.reserve_a, reserves.reserve_b
        else:
            reserve_in, reserve_out = reserves.reserve_b, reserves.reserve_a

        amount_in_units = pricing.to_units(amount, token_in.decimals)
        require_units_within_limit(amount_in_units, "amount")
        if amount_in_units <= 0:
            raise ValidationError("amount is below the token's smallest unit")
        amount_out_units = pricing.quote_swap_output(amount_in_units, reserve_in, reserve_out, fee_bps)
        min_out_units = pricing.min_output_after_slippage(amount_out_units, slippage_bps)
        return SwapQuote(
            pool_key=pool.pool_key,
            from_symbol=token_in.symbol,
            to_symbol=token_out.symbol,
            token_in_id=token_in.token_id,
            token_out_id=token_out.token_id,
            fee_bps=fee_bps,
            slippage_bps=slippage_bps,
            amount_in_units=amount_in_units,
            amount_out_units=amount_out_units,
            min_out_units=min_out_units,
            amount_in=pricing.to_tokens(amount_in_units, token_in.decimals),
            amount_out=pricing.to_tokens(amount_out_units, token_out.decimals),
            min_out=pricing.to_tokens(min_out_units, token_out.decimals),
            reserves=reserves,
        )

    def _operator_id(self) -> str:
        if not self._settings.operator_id:
            raise ValidationError("Missing OPERATOR_ID. Check the environment or .env file.")
        return self._settings.operator_id

    def _new_transaction(self, memo_suffix: str) -> TransferTransaction:
        created_ms = self._stamper.stamp(self._clock())
        return TransferTransaction.create(
            payer_account_id=self._operator_id(),
            valid_start=from_epoch_ms(created_ms),
            memo=f"{self._settings.tx_memo_prefix}:{memo_suffix}",
            max_fee=self._settings.max_transaction_fee,
            valid_duration_s=self._settings.tx_valid_duration_seconds,
        )

    def _record(
        self,
        tx: TransferTransaction,
        action: PendingAction,
        pool: Pool,
        account_id: str,
        **amounts,
    ) -> PendingTransaction:
        created_at = from_epoch_ms(tx.valid_start_ms)
        entry = PendingTransaction(
            pending_id=make_pending_id(pool.pool_key, account_id, action, tx.valid_start_ms),
            action=action,
            account_id=account_id,
            pool_key=pool.pool_key,
            pool_account_id=pool.pool_account_id,
            transaction_id=tx.transaction_id,
            body_hash=tx.body_hash(),
            created_at=created_at,
            expires_at=self._pending.expires_at_for(created_at),
            **amounts,
        )
        self._pending.create(entry)
        logger.info("Built %s %s for %s in %s", action.value, entry.pending_id, account_id, pool.pool_key)
        return entry

    @staticmethod
    def _build_result(
        entry: PendingTransaction,
        tx: TransferTransaction,
        amounts: dict[str, int],
        quote: Optional[SwapQuote] = None,
    ) -> BuildResult:
        return BuildResult(
            pending_id=entry.pending_id,
            action=entry.action,
            pool_key=entry.pool_key,
            account_id=entry.account_id,
            transaction_id=entry.transaction_id,
            tx_bytes=tx.to_bytes(),
            expires_at=entry.expires_at,
            amounts=amounts,
            quote=quote,
        )
