from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from derbysim.core.errors import RaceInterruptedError

if TYPE_CHECKING:
    import random

    from derbysim.core.protocols import FinishListener
    from derbysim.engine.track import Track
    from derbysim.simulation.config import RaceRules

logger = logging.getLogger(__name__)


class Competitor:
    """
    An autonomous racer running its own loop on its own thread.

    Only the owning thread writes `position`; the judge and the reporter read
    it concurrently. Rebinding an int attribute is atomic, so readers never see
    a torn value, and the write lock keeps the read-add-store sequence whole.
    """

    def __init__(
        self,
        idx: int,
        name: str,
        track: Track,
        velocity: int,
        stamina: int,
        rng: random.Random,
        rest_roll_max: int = 5,
    ) -> None:
        self.idx = idx
        self.name = name
        self.track = track
        self.velocity = velocity
        self.stamina = stamina
        self.rest_roll_max = rest_roll_max
        # Never shared with another competitor
        self._rng = rng

        self._position = 0
        self._write_lock = threading.Lock()
        self._listener: FinishListener | None = None
        self._finish_signalled = False
        self._thread: threading.Thread | None = None
        self.error: BaseException | None = None

    @classmethod
    def create(
        cls,
        idx: int,
        name: str,
        track: Track,
        rules: RaceRules,
        rng: random.Random,
    ) -> Competitor:
        """Draw velocity, then stamina, from the competitor's own generator."""
        velocity = rng.randint(rules.min_stat, rules.max_stat)
        stamina = rng.randint(rules.min_stat, rules.max_stat)
        return cls(
            idx=idx,
            name=name,
            track=track,
            velocity=velocity,
            stamina=stamina,
            rng=rng,
            rest_roll_max=rules.rest_roll_max,
        )

    @property
    def repr(self) -> str:
        return f"{self.name} (velocity={self.velocity}, stamina={self.stamina})"

    # --- Position ---
    def current_position(self) -> int:
        return self._position

    def has_finished(self) -> bool:
        return self._position >= self.track.total_distance

    def advance(self, distance: int | None = None) -> int:
        """Move forward by `distance`, or by velocity when omitted."""
        step = self.velocity if distance is None else distance
        if step < 0:
            msg = f"{self.name} cannot move backwards ({step})"
            raise ValueError(msg)

        with self._write_lock:
            self._position += step
            position = self._position

        if position >= self.track.total_distance:
            self._signal_finished()
        return position

    def _signal_finished(self) -> None:
        # advance() is only called from the owning thread, so no race on the flag
        if self._finish_signalled:
            return
        self._finish_signalled = True
        logger.info(f"FINISH {self.name} crossed {self.track.total_distance}")
        if self._listener is not None:
            self._listener.notify_finished(self)

    # --- Loop ---
    def rest_units(self) -> int:
        return max(self._rng.randint(1, self.rest_roll_max) - self.stamina, 0)

    def step(self) -> None:
        """One iteration: advance, try the bonus, rest."""
        position = self.advance()
        self.track.try_apply_bonus(self)
        rest = self.rest_units()
        logger.debug(f"{self.name} at {position}, Rest {rest}")
        self.track.clock.sleep(rest)

    def run(self) -> None:
        while not self.has_finished():
            self.step()

    def _run_thread(self) -> None:
        try:
            self.run()
        except Exception as e:
            # Handed to the judge, which re-raises it on the orchestrator's thread
            self.error = e
            logger.error(
                f"!!! {self.name} stopped at {self._position}: {e}",
                exc_info=not isinstance(e, RaceInterruptedError),
            )
            if self._listener is not None:
                self._listener.notify_failed(self, e)

    def attach(self, listener: FinishListener) -> None:
        self._listener = listener

    def start(self, listener: FinishListener | None = None) -> None:
        if self._thread is not None:
            msg = f"{self.name} is already running"
            raise RuntimeError(msg)
        if listener is not None:
            self.attach(listener)
        self._thread = threading.Thread(
            target=self._run_thread,
            name=self.name,
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
