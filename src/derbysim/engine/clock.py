from __future__ import annotations

import threading
from dataclasses import dataclass, field

from derbysim.core.errors import RaceInterruptedError


@dataclass
class RaceClock:
    """
    Converts simulated time units into real waits.

    Every timed wait in a race goes through the same interrupt event, so one
    call to `interrupt()` wakes all rests, bonus holds and lock waits at once.
    """

    time_unit: float = 1.0
    interrupt_event: threading.Event = field(default_factory=threading.Event)

    @property
    def interrupted(self) -> bool:
        return self.interrupt_event.is_set()

    def seconds(self, units: float) -> float:
        return max(units, 0) * self.time_unit

    def sleep(self, units: float) -> None:
        """Block for `units` time units or raise if interrupted first."""
        if self.interrupt_event.wait(self.seconds(units)):
            msg = f"Wait of {units} time units was interrupted"
            raise RaceInterruptedError(msg)

    def interrupt(self) -> None:
        self.interrupt_event.set()
