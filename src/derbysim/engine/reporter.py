from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from derbysim.engine.competitor import Competitor

StatusSink = Callable[[str], None]


def render_status(snapshot: Sequence[tuple[str, int]]) -> str:
    return "".join(f"{name}: {position} | " for name, position in snapshot)


class Reporter:
    """
    Publishes a status line with every competitor's position on a fixed tick.

    Only reads positions, never takes a lock a competitor could be waiting on,
    and runs on a daemon thread so a forgotten `stop()` cannot hang the process.
    """

    def __init__(
        self,
        competitors: Sequence[Competitor],
        sink: StatusSink,
        interval: float = 0.1,
    ) -> None:
        self.competitors = tuple(competitors)
        self.sink = sink
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def snapshot(self) -> list[tuple[str, int]]:
        return [(c.name, c.current_position()) for c in self.competitors]

    def report(self) -> str:
        line = render_status(self.snapshot())
        self.sink(line)
        return line

    def run(self) -> None:
        self.report()
        while not self._stop.wait(self.interval):
            self.report()

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="reporter", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop ticking and emit one last snapshot."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self.report()
