"""
Pytest configuration and fixtures for the pool control plane tests.

This module provides:
- In-memory SQLite database fixtures
- A controllable UTC clock
- A stub ledger with funded, associated accounts and known signing keys
- Repository, service and AppContext fixtures
- Helpers that play the external wallet (sign built bytes, submit)
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest
from eth_account.signers.local import LocalAccount
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from poolkeeper.main import app
from poolkeeper.app_context import AppContext, set_app_context
from poolkeeper.config.settings import Settings, reset_settings, set_settings
from poolkeeper.core.keys import KeyStore, parse_private_key
from poolkeeper.core.timing import UTC
from poolkeeper.core.transfer_tx import TransferTransaction
from poolkeeper.domain.views import BuildResult, SubmitResult
from poolkeeper.providers import StubLedger
from poolkeeper.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from poolkeeper.repositories.sqlalchemy import orm_models  # noqa: F401
from poolkeeper.repositories.sqlalchemy import (
    SqlAlchemyPoolRepository,
    SqlAlchemyLiquidityRepository,
    SqlAlchemyPendingRepository,
    SqlAlchemyFaucetRepository,
)
from poolkeeper.services import (
    FaucetGate,
    LiquidityLedger,
    PendingStore,
    PoolRegistryService,
    TransactionCoordinator,
)


# =============================================================================
# LEDGER FIXTURE DATA
# =============================================================================

OPERATOR_ID = "0.0.1001"
POOL_ACCOUNT_ID = "0.0.3001"
USER_ID = "0.0.5001"
OTHER_USER_ID = "0.0.5002"

HUSD_ID = "0.0.2001"
HEUR_ID = "0.0.2002"
POOL_KEY = "hUSD-hEUR"

OPERATOR_KEY_HEX = "0x" + "11" * 32
POOL_KEY_HEX = "22" * 32
USER_KEY_HEX = "33" * 32
OTHER_USER_KEY_HEX = "44" * 32

ONE = 10 ** 6
TREASURY_UNITS = 1_000_000 * ONE
USER_UNITS = 100_000 * ONE

REGISTRY = {
    "tokens": {
        "hUSD": {"tokenId": HUSD_ID, "decimals": 6},
        "hEUR": {"tokenId": HEUR_ID, "decimals": 6},
    },
    "pools": [
        {
            "poolKey": POOL_KEY,
            "poolAccountId": POOL_ACCOUNT_ID,
            "tokenA": "hUSD",
            "tokenB": "hEUR",
            "feeBps": 30,
        }
    ],
}


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create an aware UTC datetime."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return utc_datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def pool_repo(test_session) -> SqlAlchemyPoolRepository:
    return SqlAlchemyPoolRepository(test_session)


@pytest.fixture
def liquidity_repo(test_session) -> SqlAlchemyLiquidityRepository:
    return SqlAlchemyLiquidityRepository(test_session)


@pytest.fixture
def pending_repo(test_session) -> SqlAlchemyPendingRepository:
    return SqlAlchemyPendingRepository(test_session)


@pytest.fixture
def faucet_repo(test_session) -> SqlAlchemyFaucetRepository:
    return SqlAlchemyFaucetRepository(test_session)


# =============================================================================
# KEYS AND LEDGER
# =============================================================================


@pytest.fixture
def operator_account() -> LocalAccount:
    return parse_private_key(OPERATOR_KEY_HEX, "OPERATOR_KEY")


@pytest.fixture
def pool_account() -> LocalAccount:
    return parse_private_key(POOL_KEY_HEX, "poolKeyHex")


@pytest.fixture
def user_account() -> LocalAccount:
    return parse_private_key(USER_KEY_HEX, "user key")


@pytest.fixture
def other_user_account() -> LocalAccount:
    return parse_private_key(OTHER_USER_KEY_HEX, "user key")


@pytest.fixture
def settings() -> Settings:
    """Settings for tests; nothing is read from the environment file."""
    return Settings(
        _env_file=None,
        operator_id=OPERATOR_ID,
        operator_key=OPERATOR_KEY_HEX,
        ledger_backend="stub",
        database_url="sqlite://",
    )


@pytest.fixture
def key_store(operator_account, pool_account) -> KeyStore:
    return KeyStore(operator_key=operator_account, pool_keys={POOL_KEY: pool_account})


@pytest.fixture
def stub_ledger(clock, operator_account, pool_account, user_account, other_user_account) -> StubLedger:
    """
    Stub ledger where the operator treasury and both users hold hUSD/hEUR
    and the pool account is associated but empty.
    """
    ledger = StubLedger(clock=clock)
    ledger.register_account(OPERATOR_ID, operator_account.address)
    ledger.register_account(POOL_ACCOUNT_ID, pool_account.address)
    ledger.register_account(USER_ID, user_account.address)
    ledger.register_account(OTHER_USER_ID, other_user_account.address)
    ledger.associate(POOL_ACCOUNT_ID, HUSD_ID, HEUR_ID)
    for token_id in (HUSD_ID, HEUR_ID):
        ledger.credit(OPERATOR_ID, token_id, TREASURY_UNITS)
        ledger.credit(USER_ID, token_id, USER_UNITS)
        ledger.credit(OTHER_USER_ID, token_id, USER_UNITS)
    return ledger


@pytest.fixture
def context(settings, stub_ledger, key_store, clock) -> AppContext:
    """AppContext wired to the stub ledger and the fake clock."""
    ctx = AppContext(
        settings=settings,
        mirror=stub_ledger,
        ledger_client=stub_ledger,
        keys=key_store,
        clock=clock,
    )
    yield ctx
    ctx.close()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def registry(context, test_session) -> PoolRegistryService:
    """PoolRegistryService with the test registry loaded."""
    service = context.registry(test_session)
    service.load_registry_data(REGISTRY)
    return service


@pytest.fixture
def pool(registry):
    return registry.get_pool(POOL_KEY)


@pytest.fixture
def liquidity_ledger(context, test_session) -> LiquidityLedger:
    return context.liquidity(test_session)


@pytest.fixture
def pending_store(context, test_session) -> PendingStore:
    return context.pending(test_session)


@pytest.fixture
def coordinator(context, test_session, registry) -> TransactionCoordinator:
    return context.coordinator(test_session)


@pytest.fixture
def faucet_gate(context, test_session, registry) -> FaucetGate:
    return context.faucet(test_session)


# =============================================================================
# WALLET HELPERS
# =============================================================================


def wallet_sign(result: BuildResult, *signers: LocalAccount) -> bytes:
    """Play the external wallet: sign the built bytes and return them."""
    tx = TransferTransaction.from_bytes(result.tx_bytes)
    for signer in signers:
        tx.sign(signer)
    return tx.to_bytes()


@pytest.fixture
def sign_and_submit(coordinator, user_account) -> Callable[..., SubmitResult]:
    """Sign a build result as the user (or `signer`) and submit it."""

    def _sign_and_submit(result: BuildResult, signer: Optional[LocalAccount] = None) -> SubmitResult:
        return coordinator.submit(result.pending_id, wallet_sign(result, signer or user_account))

    return _sign_and_submit


@pytest.fixture
def seeded_pool(coordinator, sign_and_submit):
    """
    Pool seeded by USER_ID with 1,000 hUSD and 1,000 hEUR through a confirmed
    first deposit (1,000,000,000 units minted).
    """
    result = coordinator.build_liquidity_add(POOL_KEY, USER_ID, "1000", amount_b="1000")
    sign_and_submit(result)
    return coordinator.pool_state(POOL_KEY)


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, test_session, context, registry) -> TestClient:
    """Provide FastAPI test client with test database and stub ledger."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    set_settings(context.settings)
    reset_database()
    set_app_context(context)
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    set_app_context(None)
    reset_database()
    reset_settings()
