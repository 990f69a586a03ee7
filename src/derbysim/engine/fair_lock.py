"""First-come-first-served exclusive lock with explicit hand-off."""

from __future__ import annotations

import threading
from collections import deque
from typing import TYPE_CHECKING

from derbysim.core.errors import RaceInterruptedError

if TYPE_CHECKING:
    from types import TracebackType

# How often a queued waiter re-checks the interrupt event
INTERRUPT_POLL_SECONDS = 0.05


class FairLock:
    """
    Single-holder lock granting ownership strictly in arrival order.

    `threading.Lock` makes no ordering promise, so a waiter could be overtaken
    forever. Here every blocked caller takes a ticket; `release()` passes
    ownership straight to the oldest ticket without ever marking the lock free,
    so a newcomer cannot barge in between.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._waiters: deque[threading.Event] = deque()
        self._held = False

    @property
    def locked(self) -> bool:
        with self._mutex:
            return self._held

    @property
    def queued(self) -> int:
        """Number of callers currently waiting for ownership."""
        with self._mutex:
            return len(self._waiters)

    def acquire(self, interrupt: threading.Event | None = None) -> None:
        """
        Block until the lock is handed to the caller.

        Args:
            interrupt: When set while waiting, the ticket is withdrawn and
                RaceInterruptedError is raised.
        """
        with self._mutex:
            if not self._held and not self._waiters:
                self._held = True
                return
            ticket = threading.Event()
            self._waiters.append(ticket)

        if interrupt is None:
            ticket.wait()
            return

        while not ticket.wait(INTERRUPT_POLL_SECONDS):
            if interrupt.is_set():
                self._withdraw(ticket)
                msg = "Interrupted while waiting for the bonus lock"
                raise RaceInterruptedError(msg)

    def _withdraw(self, ticket: threading.Event) -> None:
        with self._mutex:
            if ticket.is_set():
                # Ownership arrived between the timeout and the interrupt check
                self._hand_off()
            else:
                self._waiters.remove(ticket)

    def release(self) -> None:
        with self._mutex:
            if not self._held:
                msg = "release() called on an unheld FairLock"
                raise RuntimeError(msg)
            self._hand_off()

    def _hand_off(self) -> None:
        # Caller holds _mutex
        if self._waiters:
            self._waiters.popleft().set()
        else:
            self._held = False

    def __enter__(self) -> FairLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
