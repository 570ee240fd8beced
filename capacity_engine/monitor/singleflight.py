# capacity_engine/monitor/singleflight.py
"""Request de-duplication: concurrent callers for one key share one call."""

from concurrent.futures import Future
from threading import Lock
from typing import Callable, Dict, TypeVar

T = TypeVar("T")


class _Call:
    def __init__(self):
        self.future: Future = Future()
        self.waiters = 0


class SingleFlight:
    """
    Run at most one call per key at a time.

    Callers that arrive while a call for the same key is in flight block
    until it finishes and receive its result, or its exception.
    """

    def __init__(self):
        self._lock = Lock()
        self._calls: Dict[str, _Call] = {}

    def do(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call
            call.waiters += 1

        if not leader:
            return call.future.result()

        try:
            result = fn()
        except BaseException as e:
            with self._lock:
                del self._calls[key]
            call.future.set_exception(e)
            raise

        with self._lock:
            del self._calls[key]
        call.future.set_result(result)
        return result

    def pending(self, key: str) -> int:
        """Number of callers attached to the in-flight call for key."""
        with self._lock:
            call = self._calls.get(key)
            return call.waiters if call else 0
