"""Race exception hierarchy.

All race-specific exceptions inherit from RaceError. None of them is retried:
they surface at the point of failure and end the unit that raised them.
"""


class RaceError(Exception):
    """Base exception for all race errors."""


class InvalidCompetitorCountError(RaceError, ValueError):
    """Raised when the competitor count is malformed or not positive."""

    def __init__(self, raw: object) -> None:
        self.raw = raw
        super().__init__(f"Invalid competitor count: {raw!r}")


class RaceInterruptedError(RaceError):
    """Raised when a rest, bonus hold or lock wait is interrupted."""


class CompetitorFailedError(RaceError):
    """Raised by the judge when a competitor loop died before finishing."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Competitor {name} stopped running: {cause}")


class NotEnoughFinishersError(RaceError):
    """Raised when more winners are requested than the finish order holds."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot report top {requested}: only {available} competitors finished",
        )


class RaceNotFinishedError(RaceError):
    """Raised when the finish order is read before the judge terminated."""
