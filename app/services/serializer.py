"""
Write Serializer
Runs read-modify-write tasks one at a time per document key, in arrival order.

Only protects writers inside this process. A second process writing the same
blob can still overwrite our changes.
"""

import logging
import threading
from typing import Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class FifoLock:
    """
    Ticket lock: waiters are admitted strictly in the order they arrived.
    A plain threading.Lock gives no ordering guarantee.

    Reentrant for the holding thread, so a queued task may call code that
    queues on the same key.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._abandoned = set()
        self._owner = None
        self._depth = 0

    def _advance(self):
        # Caller holds the condition
        self._now_serving += 1
        while self._now_serving in self._abandoned:
            self._abandoned.discard(self._now_serving)
            self._now_serving += 1
        self._condition.notify_all()

    def acquire(self):
        me = threading.get_ident()
        with self._condition:
            if self._owner == me:
                self._depth += 1
                return
            ticket = self._next_ticket
            self._next_ticket += 1
            try:
                while ticket != self._now_serving:
                    self._condition.wait()
            except BaseException:
                # Interrupted waiter: give up the ticket so the queue moves on
                if ticket == self._now_serving:
                    self._advance()
                else:
                    self._abandoned.add(ticket)
                raise
            self._owner = me
            self._depth = 1

    def release(self):
        with self._condition:
            if self._owner != threading.get_ident():
                raise RuntimeError('release of a lock not held by this thread')
            self._depth -= 1
            if self._depth:
                return
            self._owner = None
            self._advance()

    @property
    def pending(self) -> int:
        """Tasks holding or waiting for the lock."""
        with self._condition:
            return self._next_ticket - self._now_serving - len(self._abandoned)

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class WriteSerializer:
    """One FIFO queue per document key."""

    def __init__(self):
        self._locks: Dict[str, FifoLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> FifoLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = FifoLock()
                self._locks[key] = lock
            return lock

    def run(self, key: str, task: Callable[[], T]) -> T:
        """
        Run task once every earlier task for key has finished.

        The task's exception (if any) is raised to this caller only; the
        queue moves on to the next task regardless.
        """
        lock = self._lock_for(key)
        with lock:
            logger.debug(f"[Serializer] {key}: running task")
            return task()

    def pending(self, key: str) -> int:
        with self._guard:
            lock = self._locks.get(key)
        return lock.pending if lock else 0
