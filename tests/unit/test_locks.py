"""
Unit tests for KeyedLock and MillisecondStamper.
"""

import threading
import time

from poolkeeper.core.locks import KeyedLock
from poolkeeper.core.timing import MillisecondStamper, to_epoch_ms


class TestKeyedLock:
    """Tests for per-key mutual exclusion."""

    def test_same_key_is_exclusive(self):
        """
        GIVEN one thread holding a key
        WHEN another thread asks for the same key
        THEN it waits until the first releases
        """
        locks = KeyedLock()
        order = []
        entered = threading.Event()

        def first():
            with locks.hold(("liquidity", "0.0.5001", "hUSD-hEUR")):
                entered.set()
                time.sleep(0.1)
                order.append("first")

        def second():
            with locks.hold(("liquidity", "0.0.5001", "hUSD-hEUR")):
                order.append("second")

        t1 = threading.Thread(target=first)
        t1.start()
        assert entered.wait(5)
        t2 = threading.Thread(target=second)
        t2.start()
        t1.join(5)
        t2.join(5)

        assert order == ["first", "second"]

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        with locks.hold(("faucet", "0.0.5001")):
            acquired = threading.Event()

            def other():
                with locks.hold(("faucet", "0.0.5002")):
                    acquired.set()

            t = threading.Thread(target=other)
            t.start()
            assert acquired.wait(5)
            t.join(5)

    def test_released_keys_are_forgotten(self):
        locks = KeyedLock()
        with locks.hold("a"):
            with locks.hold(("pending", "b")):
                assert locks.active_keys() == 2
        assert locks.active_keys() == 0


class TestMillisecondStamper:
    """Tests for strictly increasing stamps."""

    def test_same_instant_gets_distinct_stamps(self, fixed_now):
        stamper = MillisecondStamper()
        stamps = [stamper.stamp(fixed_now) for _ in range(3)]
        base = to_epoch_ms(fixed_now)
        assert stamps == [base, base + 1, base + 2]

    def test_clock_going_backwards(self, fixed_now, clock):
        stamper = MillisecondStamper()
        later = stamper.stamp(clock.advance(seconds=1))
        assert stamper.stamp(fixed_now) == later + 1
