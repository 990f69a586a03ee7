"""Race orchestration: build the track and field, run everyone, collect the result."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from derbysim.core.errors import InvalidCompetitorCountError, NotEnoughFinishersError
from derbysim.engine.clock import RaceClock
from derbysim.engine.competitor import Competitor
from derbysim.engine.judge import Judge
from derbysim.engine.reporter import Reporter
from derbysim.engine.track import Track
from derbysim.simulation.config import RaceRules

if TYPE_CHECKING:
    from derbysim.engine.reporter import StatusSink

logger = logging.getLogger(__name__)

PODIUM_SIZE = 3


def competitor_name(idx: int) -> str:
    return f"c{idx + 1}"


@dataclass(frozen=True, slots=True)
class RaceResult:
    finish_order: tuple[str, ...]
    seed: int | None = None

    def winners(self, n: int = PODIUM_SIZE) -> tuple[str, ...]:
        """The first `n` finishers, in order. Never truncated."""
        if n < 1:
            msg = f"Number of winners must be positive, got {n}"
            raise ValueError(msg)
        if len(self.finish_order) < n:
            raise NotEnoughFinishersError(n, len(self.finish_order))
        return self.finish_order[:n]


@dataclass
class Race:
    """
    Owns the track and the field for one race.

    Nothing here is process-global: two Race objects can run side by side.
    """

    track: Track
    competitors: list[Competitor]
    rules: RaceRules
    seed: int | None = None

    @classmethod
    def setup(
        cls,
        count: int,
        rules: RaceRules | None = None,
        seed: int | None = None,
        clock: RaceClock | None = None,
    ) -> Race:
        """
        Build the track and `count` competitors.

        A master generator seeded with `seed` hands out one independent seed
        per competitor and one for the track, so a fixed seed reproduces every
        draw no matter how the threads interleave.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidCompetitorCountError(count)

        rules = (rules or RaceRules()).validate()
        clock = clock or RaceClock(time_unit=rules.time_unit)
        master = random.Random(seed)

        track = Track.generate(rules, random.Random(master.getrandbits(64)), clock)
        competitors = [
            Competitor.create(
                idx=i,
                name=competitor_name(i),
                track=track,
                rules=rules,
                rng=random.Random(master.getrandbits(64)),
            )
            for i in range(count)
        ]
        return cls(track=track, competitors=competitors, rules=rules, seed=seed)

    def run(self, sink: StatusSink | None = None) -> RaceResult:
        """
        Start every competitor, the reporter and the judge; block on the judge.

        Any failure while waiting (a dead competitor, Ctrl+C) interrupts the
        clock so the remaining competitor threads stop, then propagates.
        """
        judge = Judge(self.competitors)
        reporter = Reporter(
            self.competitors,
            sink=sink or _log_status,
            interval=self.rules.report_interval,
        )

        for competitor in self.competitors:
            logger.debug(f"Starting {competitor.repr}")
            competitor.start(judge)
        reporter.start()
        judge.start()

        try:
            order = judge.wait()
        except BaseException:
            self.interrupt()
            raise
        finally:
            reporter.stop(timeout=self.rules.report_interval * 2)

        return RaceResult(
            finish_order=tuple(c.name for c in order),
            seed=self.seed,
        )

    def interrupt(self) -> None:
        logger.warning("Interrupting the race")
        self.track.clock.interrupt()


def _log_status(line: str) -> None:
    logger.debug(line)
