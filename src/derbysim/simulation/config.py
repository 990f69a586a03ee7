"""Configuration schema for races using msgspec."""

from __future__ import annotations

from pathlib import Path

import msgspec


class RaceRules(msgspec.Struct, frozen=True):
    """
    Immutable race constants.
    Durations are expressed in time units; `time_unit` converts them to seconds.
    """

    total_distance: int = 1000
    bonus_width: int = 50
    bonus_distance: int = 100
    bonus_hold: float = 7

    # Velocity and stamina are both drawn from [min_stat, max_stat]
    min_stat: int = 1
    max_stat: int = 3
    # Rest is max(randint(1, rest_roll_max) - stamina, 0)
    rest_roll_max: int = 5

    time_unit: float = 1.0
    report_interval: float = 0.1

    def validate(self) -> RaceRules:
        if self.total_distance <= 0:
            msg = f"total_distance must be positive, got {self.total_distance}"
            raise ValueError(msg)
        if not 0 <= self.bonus_width <= self.total_distance:
            msg = f"bonus_width must lie in [0, {self.total_distance}], got {self.bonus_width}"
            raise ValueError(msg)
        if self.min_stat < 1 or self.min_stat > self.max_stat:
            msg = f"Stat range must be non-empty and start at 1 or more, got [{self.min_stat}, {self.max_stat}]"
            raise ValueError(msg)
        if self.bonus_distance < 0:
            msg = f"bonus_distance must not be negative, got {self.bonus_distance}"
            raise ValueError(msg)
        if self.rest_roll_max < 1:
            msg = f"rest_roll_max must be at least 1, got {self.rest_roll_max}"
            raise ValueError(msg)
        if self.time_unit < 0 or self.bonus_hold < 0:
            msg = "time_unit and bonus_hold must not be negative"
            raise ValueError(msg)
        if self.report_interval <= 0:
            msg = f"report_interval must be positive, got {self.report_interval}"
            raise ValueError(msg)
        return self

    def with_overrides(self, overrides: dict[str, str | int | float]) -> RaceRules:
        """
        Return a copy with the given fields replaced.
        String values from the command line are coerced to the field types.
        """
        unknown = set(overrides) - set(self.__struct_fields__)
        if unknown:
            msg = f"Unknown rule(s): {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        merged = {**msgspec.structs.asdict(self), **overrides}
        return msgspec.convert(merged, type=RaceRules, strict=False).validate()


class RaceConfig(msgspec.Struct):
    """
    TOML-backed configuration for a single race.
    Missing fields fall back to the CLI (count, seed) or to RaceRules defaults.
    """

    competitors: int | None = None
    seed: int | None = None
    rules: RaceRules = msgspec.field(default_factory=RaceRules)

    @classmethod
    def from_toml(cls, path: str | Path) -> RaceConfig:
        """Load configuration from a TOML file path."""
        with Path(path).open("rb") as f:
            config = msgspec.toml.decode(f.read(), type=cls)
        config.rules.validate()
        return config
