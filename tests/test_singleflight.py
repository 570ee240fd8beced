#tests\test_singleflight.py

"""Test request de-duplication."""

import threading
import time

import pytest

from capacity_engine.monitor.singleflight import SingleFlight


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.01)


class TestSingleFlight:
    """Test concurrent callers sharing one call."""

    def test_sequential_calls_each_run(self):
        flights = SingleFlight()
        calls = []

        flights.do("k", lambda: calls.append(1))
        flights.do("k", lambda: calls.append(1))

        assert len(calls) == 2
        assert flights.pending("k") == 0

    def test_concurrent_callers_share_result(self):
        flights = SingleFlight()
        release = threading.Event()
        calls = []
        results = []

        def fetch():
            calls.append(1)
            release.wait(5)
            return "fleet"

        def caller():
            results.append(flights.do("full-fleet", fetch))

        leader = threading.Thread(target=caller)
        leader.start()
        wait_for(lambda: flights.pending("full-fleet") == 1)

        follower = threading.Thread(target=caller)
        follower.start()
        wait_for(lambda: flights.pending("full-fleet") == 2)

        release.set()
        leader.join(5)
        follower.join(5)

        assert len(calls) == 1
        assert results == ["fleet", "fleet"]
        assert flights.pending("full-fleet") == 0

    def test_followers_receive_exception(self):
        flights = SingleFlight()
        release = threading.Event()
        errors = []

        def fetch():
            release.wait(5)
            raise RuntimeError("panel down")

        def caller():
            try:
                flights.do("node:1", fetch)
            except RuntimeError as e:
                errors.append(str(e))

        threads = [threading.Thread(target=caller)]
        threads[0].start()
        wait_for(lambda: flights.pending("node:1") == 1)
        threads.append(threading.Thread(target=caller))
        threads[1].start()
        wait_for(lambda: flights.pending("node:1") == 2)

        release.set()
        for t in threads:
            t.join(5)

        assert errors == ["panel down", "panel down"]

    def test_leader_exception_propagates(self):
        flights = SingleFlight()

        def fetch():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            flights.do("k", fetch)

        assert flights.do("k", lambda: 42) == 42

    def test_keys_are_independent(self):
        flights = SingleFlight()

        assert flights.do("node:1", lambda: 1) == 1
        assert flights.do("node:2", lambda: 2) == 2
