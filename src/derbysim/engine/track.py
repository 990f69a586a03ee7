from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from derbysim.engine.fair_lock import FairLock

if TYPE_CHECKING:
    import random

    from derbysim.core.protocols import PositionSource
    from derbysim.engine.clock import RaceClock
    from derbysim.simulation.config import RaceRules

logger = logging.getLogger(__name__)


class BonusZone(NamedTuple):
    lower: int
    upper: int

    def contains(self, position: int) -> bool:
        """Both bounds are exclusive."""
        return self.lower < position < self.upper


@dataclass
class Track:
    """
    Shared race environment.

    Total distance and the bonus zone never change after construction. The
    bonus itself is guarded by a FairLock so at most one competitor is inside
    the bonus hold at any time, and waiters are served in arrival order.
    The zone is not consumed: every check from inside it earns the bonus.
    """

    total_distance: int
    bonus_zone: BonusZone
    clock: RaceClock
    bonus_distance: int = 100
    bonus_hold: float = 7
    _bonus_lock: FairLock = field(default_factory=FairLock, init=False, repr=False)

    @classmethod
    def generate(
        cls,
        rules: RaceRules,
        rng: random.Random,
        clock: RaceClock,
    ) -> Track:
        """Place the bonus zone uniformly inside the track."""
        lower = rng.randint(0, rules.total_distance - rules.bonus_width)
        return cls(
            total_distance=rules.total_distance,
            bonus_zone=BonusZone(lower, lower + rules.bonus_width),
            clock=clock,
            bonus_distance=rules.bonus_distance,
            bonus_hold=rules.bonus_hold,
        )

    @property
    def bonus_lock(self) -> FairLock:
        return self._bonus_lock

    def try_apply_bonus(self, competitor: PositionSource) -> bool:
        """
        Grant the bonus if the competitor stands strictly inside the zone.

        Blocks until the bonus lock is handed over, holds it for `bonus_hold`
        time units, then adds `bonus_distance`. The lock is released even if
        the hold is interrupted.
        """
        position = competitor.current_position()
        if not self.bonus_zone.contains(position):
            return False

        logger.debug(f"{competitor.name} queues for the bonus at {position}")
        self._bonus_lock.acquire(self.clock.interrupt_event)
        try:
            self.clock.sleep(self.bonus_hold)
            new_position = competitor.advance(self.bonus_distance)
        finally:
            self._bonus_lock.release()

        logger.info(
            f"BONUS {competitor.name} +{self.bonus_distance}: {position} -> {new_position}",
        )
        return True

    def describe(self) -> str:
        lower, upper = self.bonus_zone
        return (
            f"Total distance: {self.total_distance} | "
            f"bonus zone between {lower} and {upper}"
        )
