"""
Integration tests for the full pool lifecycle on a file-backed SQLite database.

Tests cover:
- Pending entries surviving a new session and a new AppContext
- A seed / swap / add / remove sequence keeping totals consistent
- Conservation of tokens across the pool and its users
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from poolkeeper.app_context import AppContext
from poolkeeper.repositories.sqlalchemy.database import Base
from poolkeeper.repositories.sqlalchemy import orm_models  # noqa: F401

from tests.conftest import (
    HEUR_ID,
    HUSD_ID,
    ONE,
    OTHER_USER_ID,
    POOL_ACCOUNT_ID,
    POOL_KEY,
    REGISTRY,
    USER_ID,
    wallet_sign,
)


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory over a SQLite file that outlives individual sessions."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'poolkeeper.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _new_context(settings, stub_ledger, key_store, clock) -> AppContext:
    return AppContext(
        settings=settings,
        mirror=stub_ledger,
        ledger_client=stub_ledger,
        keys=key_store,
        clock=clock,
    )


class TestLifecycle:
    """End-to-end build/sign/submit flows."""

    def test_pending_survives_restart(
        self, file_sessions, settings, stub_ledger, key_store, clock, user_account
    ):
        """
        GIVEN a deposit built by one process
        WHEN a restarted process with a new session submits it
        THEN the recorded amounts are applied from the stored entry
        """
        first = _new_context(settings, stub_ledger, key_store, clock)
        session = file_sessions()
        first.registry(session).load_registry_data(REGISTRY)
        built = first.coordinator(session).build_liquidity_add(POOL_KEY, USER_ID, "100", amount_b="400")
        session.close()
        first.close()

        second = _new_context(settings, stub_ledger, key_store, clock)
        session = file_sessions()
        try:
            second.coordinator(session).submit(built.pending_id, wallet_sign(built, user_account))
            position = second.liquidity(session).get_position(USER_ID, POOL_KEY)
        finally:
            session.close()
            second.close()

        assert position.units == 200 * ONE
        assert position.deposited_a_units == 100 * ONE

    def test_seed_swap_add_remove(
        self, file_sessions, settings, stub_ledger, key_store, clock, user_account, other_user_account
    ):
        """
        GIVEN an empty pool
        WHEN it is seeded, swapped against, joined and fully exited
        THEN totals stay consistent and no tokens are created or lost
        """
        context = _new_context(settings, stub_ledger, key_store, clock)
        session = file_sessions()
        accounts = (USER_ID, OTHER_USER_ID, POOL_ACCOUNT_ID)

        def supply(token_id):
            return sum(stub_ledger.balance(a, token_id) for a in accounts)

        supply_before = (supply(HUSD_ID), supply(HEUR_ID))
        try:
            context.registry(session).load_registry_data(REGISTRY)
            coordinator = context.coordinator(session)
            liquidity = context.liquidity(session)

            def run(built, signer):
                coordinator.submit(built.pending_id, wallet_sign(built, signer))
                clock.advance(seconds=1)

            run(coordinator.build_liquidity_add(POOL_KEY, USER_ID, "1000", amount_b="2000"), user_account)
            run(coordinator.build_swap(POOL_KEY, OTHER_USER_ID, "hUSD", "hEUR", "50"), other_user_account)
            run(coordinator.build_liquidity_add(POOL_KEY, OTHER_USER_ID, "10"), other_user_account)
            run(coordinator.build_liquidity_remove(POOL_KEY, OTHER_USER_ID, percent="100"), other_user_account)
            run(coordinator.build_liquidity_remove(POOL_KEY, USER_ID, percent="100"), user_account)

            assert liquidity.verify_totals(POOL_KEY).consistent
            assert liquidity.get_total_units(POOL_KEY) == 0
            state = coordinator.pool_state(POOL_KEY)
        finally:
            session.close()
            context.close()

        assert (supply(HUSD_ID), supply(HEUR_ID)) == supply_before
        # Floor rounding leaves dust in the pool, never a deficit.
        assert state.reserves.reserve_a >= 0
        assert state.reserves.reserve_b >= 0
        assert stub_ledger.balance(POOL_ACCOUNT_ID, HUSD_ID) == state.reserves.reserve_a
