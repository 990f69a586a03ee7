from __future__ import annotations

import cappa

from derbysim.core.errors import InvalidCompetitorCountError


def parse_competitor_count(value: str | int) -> int:
    """
    Parse the number of competitors.
    Anything that is not a positive integer is rejected outright, never re-asked.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        count = value
    else:
        text = str(value).strip().removeprefix("+")
        # ASCII digits only
        if not (text.isascii() and text.isdecimal()):
            raise InvalidCompetitorCountError(value)
        count = int(text)

    if count < 1:
        raise InvalidCompetitorCountError(value)
    return count


def parse_rule_overrides(value: list[str]) -> dict[str, str]:
    """
    Split `key=value` items into a dictionary of raw strings.
    RaceRules.with_overrides coerces each value to its field type.
    """
    overrides: dict[str, str] = {}
    for item in value:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            msg = f"Invalid rule format '{item}'. Expected 'key=value'."
            raise cappa.Exit(msg, code=1)
        overrides[key.strip()] = raw.strip()
    return overrides
