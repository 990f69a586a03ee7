from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING

from typing_extensions import override

from derbysim.core.errors import CompetitorFailedError, RaceNotFinishedError
from derbysim.core.protocols import FinishListener

if TYPE_CHECKING:
    from collections.abc import Sequence

    from derbysim.engine.competitor import Competitor

logger = logging.getLogger(__name__)


class Judge(FinishListener):
    """
    Records the order in which competitors cross the finish distance.

    Competitors push a one-shot notification when they finish (or die); each
    notification wakes the judge for one scan pass over all competitors in
    creation order. Competitors found finished in the same pass are therefore
    recorded in creation order, never by arrival time within the pass.

    The judge thread is the only writer of the finish order. Readers go
    through `wait()` or `finish_order`, both of which require the done event,
    so every read happens after the last append.
    """

    def __init__(self, competitors: Sequence[Competitor]) -> None:
        self.competitors: tuple[Competitor, ...] = tuple(competitors)
        self._notifications: queue.Queue[tuple[Competitor, BaseException | None]] = (
            queue.Queue()
        )
        self._order: list[Competitor] = []
        self._recorded: set[int] = set()
        self._done = threading.Event()
        self._error: Exception | None = None
        self._thread: threading.Thread | None = None

    # --- Notifications (called from competitor threads) ---
    @override
    def notify_finished(self, competitor: Competitor) -> None:
        self._notifications.put((competitor, None))

    @override
    def notify_failed(self, competitor: Competitor, error: BaseException) -> None:
        self._notifications.put((competitor, error))

    # --- Scanning ---
    @property
    def recorded_count(self) -> int:
        return len(self._order)

    @property
    def complete(self) -> bool:
        return len(self._order) == len(self.competitors)

    def scan(self) -> list[Competitor]:
        """One pass in creation order. Returns competitors recorded by this pass."""
        recorded: list[Competitor] = []
        for competitor in self.competitors:
            if competitor.idx in self._recorded or not competitor.has_finished():
                continue
            self._recorded.add(competitor.idx)
            self._order.append(competitor)
            recorded.append(competitor)
            logger.info(f"{competitor.name} finishes #{len(self._order)}")
        return recorded

    def run(self) -> None:
        """Scan on every notification until every competitor is recorded."""
        try:
            self.scan()
            while not self.complete:
                competitor, error = self._notifications.get()
                if error is not None and not competitor.has_finished():
                    raise CompetitorFailedError(competitor.name, error) from error
                self.scan()
        finally:
            self._done.set()

    def _run_thread(self) -> None:
        try:
            self.run()
        except Exception as e:
            # Re-raised by wait() on the orchestrator's thread
            self._error = e

    def start(self) -> None:
        if self._thread is not None:
            msg = "Judge is already running"
            raise RuntimeError(msg)
        self._thread = threading.Thread(
            target=self._run_thread,
            name="judge",
            daemon=True,
        )
        self._thread.start()

    # --- Results ---
    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> tuple[Competitor, ...]:
        """Block until the judge terminates and return the finish order."""
        if not self._done.wait(timeout):
            msg = f"Judge still running after {timeout}s"
            raise RaceNotFinishedError(msg)
        if self._thread is not None:
            self._thread.join()
        if self._error is not None:
            raise self._error
        return tuple(self._order)

    @property
    def finish_order(self) -> tuple[Competitor, ...]:
        if not self._done.is_set():
            msg = "Finish order is not final until the judge has terminated"
            raise RaceNotFinishedError(msg)
        return tuple(self._order)
