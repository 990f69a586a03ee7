import cappa
import pytest

from derbysim.cli.converters import parse_competitor_count, parse_rule_overrides
from derbysim.core.errors import InvalidCompetitorCountError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5", 5), (" 7\n", 7), ("+3", 3), (4, 4)],
)
def test_parse_competitor_count(raw, expected: int):
    assert parse_competitor_count(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "0", "-2", "3.5", "1e3", "\u00b2", "+", "1_000", 0, -4, True])
def test_parse_competitor_count_rejects(raw):
    with pytest.raises(InvalidCompetitorCountError):
        parse_competitor_count(raw)


def test_invalid_count_is_also_a_value_error():
    with pytest.raises(ValueError):
        parse_competitor_count("many")


def test_parse_rule_overrides_keeps_raw_strings():
    rules = parse_rule_overrides(["total_distance=500", "time_unit=0.01", " bonus_hold = 2 ", "x=abc"])
    assert rules == {"total_distance": "500", "time_unit": "0.01", "bonus_hold": "2", "x": "abc"}


def test_parse_rule_overrides_rejects_missing_equals():
    with pytest.raises(cappa.Exit):
        parse_rule_overrides(["total_distance"])
