"""CLI command for running a single race."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path  # cappa needs this at runtime
from typing import Annotated

import cappa
import msgspec
from rich.console import Console
from rich.live import Live
from rich.text import Text

from derbysim.cli.converters import parse_competitor_count, parse_rule_overrides
from derbysim.core.errors import InvalidCompetitorCountError
from derbysim.engine.logging import configure_logging
from derbysim.engine.race import PODIUM_SIZE, Race, RaceResult
from derbysim.simulation.config import RaceConfig

logger = logging.getLogger(__name__)

COUNT_PROMPT = "Please enter the number of competitors: "


def print_roster(console: Console, race: Race) -> None:
    for competitor in race.competitors:
        console.print(
            f"Competitor {competitor.name}: "
            f"velocity={competitor.velocity} stamina={competitor.stamina}",
        )
    console.print(race.track.describe())


def print_winners(console: Console, result: RaceResult) -> None:
    winners = result.winners(PODIUM_SIZE)
    console.print("Winners:")
    for place, name in enumerate(winners, start=1):
        console.print(f"{place}. {name}")


def run_console_race(console: Console, race: Race) -> RaceResult:
    """
    Run the race with a live status line and print the podium.

    Args:
        console: Rich console shared with the log handler.
        race: A race built by Race.setup.
    """
    print_roster(console, race)

    with Live(console=console, auto_refresh=False, transient=False) as live:

        def show_status(line: str) -> None:
            live.update(Text(line), refresh=True)

        result = race.run(sink=show_status)

    try:
        print_winners(console, result)
    except Exception:
        logger.exception("Cannot report winners")
        raise

    if race.seed is not None:
        logger.info(f"Seed: {race.seed}")
    return result


@cappa.command(
    name="race",
    help="Run a threaded race. Asks for the number of competitors if not given.",
)
@dataclass
class RaceCommand:
    competitors: Annotated[
        int | None,
        cappa.Arg(short="-n", long="--competitors", help="Number of competitors."),
    ] = None
    seed: Annotated[
        int | None,
        cappa.Arg(short="-s", long="--seed", help="RNG seed."),
    ] = None
    config_file: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to TOML config file."),
    ] = None
    rules: Annotated[
        list[str] | None,
        cappa.Arg(
            short="-R",
            long="--rule",
            num_args=-1,
            help="Rule overrides as key=value (e.g. time_unit=0.01).",
        ),
    ] = None
    verbose: Annotated[
        bool,
        cappa.Arg(short="-v", long="--verbose", help="Log every step."),
    ] = False

    def __call__(self) -> None:
        console = Console()
        configure_logging(
            logging.DEBUG if self.verbose else logging.INFO,
            console=console,
        )

        # 1. Load File (Low Priority)
        config = RaceConfig()
        if self.config_file:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise cappa.Exit(msg, code=1)
            try:
                config = RaceConfig.from_toml(self.config_file)
            except (msgspec.DecodeError, msgspec.ValidationError, ValueError) as e:
                msg = f"Invalid TOML config: {e}"
                raise cappa.Exit(msg, code=1) from e

        # 2. CLI Args (High Priority)
        rules = config.rules
        if self.rules:
            try:
                rules = rules.with_overrides(parse_rule_overrides(self.rules))
            except (msgspec.ValidationError, ValueError) as e:
                msg = f"Invalid rule override: {e}"
                raise cappa.Exit(msg, code=1) from e

        seed = self.seed if self.seed is not None else config.seed
        if seed is None:
            seed = random.randint(0, 1000000)

        # 3. Competitor count: flag, then file, then prompt
        raw_count: str | int | None = self.competitors
        if raw_count is None:
            raw_count = config.competitors
        if raw_count is None:
            raw_count = console.input(COUNT_PROMPT)
        try:
            count = parse_competitor_count(raw_count)
        except InvalidCompetitorCountError as e:
            raise cappa.Exit(str(e), code=1) from e

        # 4. Execute
        race = Race.setup(count, rules=rules, seed=seed)
        run_console_race(console, race)
