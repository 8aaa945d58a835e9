"""Application context for long-lived collaborators.

Remote clients, keys, the reserve cache and the keyed locks must outlive a
request; services are request-scoped and built on top of a database session.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from poolkeeper.config.settings import Settings, get_settings
from poolkeeper.core.exceptions import ValidationError
from poolkeeper.core.keys import KeyStore
from poolkeeper.core.locks import KeyedLock
from poolkeeper.core.timing import MillisecondStamper, now_utc
from poolkeeper.providers import (
    GatewayLedgerClient,
    LedgerClient,
    MirrorNodeProvider,
    MirrorProvider,
    StubLedger,
)
from poolkeeper.repositories.sqlalchemy import (
    SqlAlchemyFaucetRepository,
    SqlAlchemyLiquidityRepository,
    SqlAlchemyPendingRepository,
    SqlAlchemyPoolRepository,
)
from poolkeeper.services import (
    FaucetGate,
    LiquidityLedger,
    PendingStore,
    PoolRegistryService,
    ReserveCache,
    TransactionCoordinator,
)

logger = logging.getLogger(__name__)


class AppContext:
    """
    Process-wide container.

    Holds the mirror, the ledger client, the key store, the reserve cache,
    the keyed locks and the id stamper, and builds request-scoped services
    for a given session.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        mirror: Optional[MirrorProvider] = None,
        ledger_client: Optional[LedgerClient] = None,
        keys: Optional[KeyStore] = None,
        clock: Callable = now_utc,
    ):
        self.settings = settings or get_settings()
        self.clock = clock

        if mirror is None or ledger_client is None:
            default_mirror, default_client = self._default_backends(self.settings, clock)
            mirror = mirror or default_mirror
            ledger_client = ledger_client or default_client
        self.mirror = mirror
        self.ledger_client = ledger_client
        self.keys = keys or KeyStore.from_settings(self.settings)

        self.reserve_cache = ReserveCache(
            mirror=self.mirror,
            timeout_seconds=self.settings.remote_timeout_seconds,
            clock=clock,
        )
        self.locks = KeyedLock()
        self.stamper = MillisecondStamper()

    @staticmethod
    def _default_backends(settings: Settings, clock: Callable):
        if settings.ledger_backend == "stub":
            logger.info("Using the in-memory stub ledger")
            stub = StubLedger(clock=clock)
            return stub, stub
        if not settings.ledger_gateway_url:
            raise ValidationError("LEDGER_GATEWAY_URL is required when LEDGER_BACKEND=http")
        return (
            MirrorNodeProvider(settings.mirror_node_url, settings.remote_timeout_seconds),
            GatewayLedgerClient(settings.ledger_gateway_url, settings.remote_timeout_seconds),
        )

    # Request-scoped services
    def registry(self, session: Session) -> PoolRegistryService:
        return PoolRegistryService(
            pool_repo=SqlAlchemyPoolRepository(session),
            session=session,
            default_fee_bps=self.settings.default_fee_bps,
            default_token_decimals=self.settings.default_token_decimals,
        )

    def liquidity(self, session: Session) -> LiquidityLedger:
        return LiquidityLedger(liquidity_repo=SqlAlchemyLiquidityRepository(session), session=session)

    def pending(self, session: Session) -> PendingStore:
        return PendingStore(
            pending_repo=SqlAlchemyPendingRepository(session),
            session=session,
            ttl_seconds=self.settings.pending_ttl_seconds,
            clock=self.clock,
        )

    def coordinator(self, session: Session) -> TransactionCoordinator:
        return TransactionCoordinator(
            registry=self.registry(session),
            reserve_cache=self.reserve_cache,
            liquidity=self.liquidity(session),
            pending=self.pending(session),
            ledger_client=self.ledger_client,
            keys=self.keys,
            locks=self.locks,
            stamper=self.stamper,
            session=session,
            settings=self.settings,
            clock=self.clock,
        )

    def faucet(self, session: Session) -> FaucetGate:
        return FaucetGate(
            faucet_repo=SqlAlchemyFaucetRepository(session),
            session=session,
            registry=self.registry(session),
            mirror=self.mirror,
            ledger_client=self.ledger_client,
            keys=self.keys,
            locks=self.locks,
            stamper=self.stamper,
            settings=self.settings,
            clock=self.clock,
        )

    def close(self) -> None:
        """Clean up resources."""
        self.reserve_cache.close()


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set (or clear) the global application context."""
    global _app_context
    _app_context = context
