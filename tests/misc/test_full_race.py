import pytest

from derbysim.core.errors import (
    CompetitorFailedError,
    InvalidCompetitorCountError,
    NotEnoughFinishersError,
)
from derbysim.engine.clock import RaceClock
from derbysim.engine.race import Race, RaceResult
from derbysim.engine.track import Track
from tests.test_utils import NO_BONUS, fast_rules, make_competitor, scripted_rng


def test_single_competitor_race():
    """
    Scenario: distance 100, one competitor with velocity 3 and stamina 3, zone unreachable.
    Verify: the race terminates and the finish order is just that competitor.
    """
    rules = fast_rules(total_distance=100)
    track = Track(100, NO_BONUS, RaceClock(time_unit=0.0))
    racer = make_competitor(0, track, velocity=3, stamina=3)

    result = Race(track=track, competitors=[racer], rules=rules).run()

    assert result.finish_order == ("c1",)
    assert racer.current_position() == 102


@pytest.mark.parametrize("count", [1, 2, 5, 12])
def test_finish_order_is_a_permutation(count: int):
    race = Race.setup(count, rules=fast_rules(total_distance=300), seed=count)
    result = race.run()

    names = [c.name for c in race.competitors]
    assert len(result.finish_order) == count
    assert sorted(result.finish_order) == sorted(names)
    assert all(c.has_finished() for c in race.competitors)


def test_seeded_setup_reproduces_every_draw():
    rules = fast_rules(total_distance=1000)
    first = Race.setup(5, rules=rules, seed=42)
    second = Race.setup(5, rules=rules, seed=42)

    assert first.track.bonus_zone == second.track.bonus_zone
    for a, b in zip(first.competitors, second.competitors, strict=True):
        assert (a.name, a.velocity, a.stamina) == (b.name, b.velocity, b.stamina)
        assert [a.rest_units() for _ in range(50)] == [b.rest_units() for _ in range(50)]


def test_competitors_get_independent_generators():
    race = Race.setup(3, rules=fast_rules(), seed=1)
    generators = {id(c._rng) for c in race.competitors}
    assert len(generators) == 3


def _scripted_race() -> Race:
    # stamina 1 and a constant roll r give a constant rest of r - 1
    rules = fast_rules(total_distance=1000, time_unit=0.001)
    track = Track(1000, NO_BONUS, RaceClock(time_unit=0.001))
    rest_rolls = [4, 1, 5, 2, 3]
    racers = [
        make_competitor(i, track, velocity=3, stamina=1, rng=scripted_rng(roll))
        for i, roll in enumerate(rest_rolls)
    ]
    return Race(track=track, competitors=racers, rules=rules, seed=0)


def test_deterministic_race_is_reproducible():
    """
    Scenario: distance 1000, five competitors with fixed parameters and rests 3, 0, 4, 1, 2.
    Verify: two runs produce the same finish order, fastest rest first.
    """
    first = _scripted_race().run()
    second = _scripted_race().run()

    assert first.finish_order == ("c2", "c4", "c5", "c1", "c3")
    assert second.finish_order == first.finish_order


def test_winners_are_the_head_of_the_finish_order():
    race = Race.setup(6, rules=fast_rules(total_distance=200), seed=3)
    result = race.run()

    assert result.winners(3) == result.finish_order[:3]
    assert result.seed == 3


def test_two_competitors_cannot_produce_a_podium():
    result = Race.setup(2, rules=fast_rules(total_distance=50), seed=5).run()
    assert len(result.finish_order) == 2

    with pytest.raises(NotEnoughFinishersError) as exc_info:
        result.winners(3)
    assert exc_info.value.available == 2


def test_winners_on_a_fixed_result():
    result = RaceResult(finish_order=("c4", "c1", "c3", "c2"))
    assert result.winners() == ("c4", "c1", "c3")
    assert result.winners(1) == ("c4",)


@pytest.mark.parametrize("n", [0, -1])
def test_winners_rejects_non_positive_counts(n):
    result = RaceResult(finish_order=("c4", "c1", "c3", "c2"))
    with pytest.raises(ValueError, match="positive"):
        result.winners(n)


def test_setup_rejects_zero_min_stat():
    with pytest.raises(ValueError):
        Race.setup(3, rules=fast_rules(min_stat=0))


@pytest.mark.parametrize("count", [0, -1, True, "3"])
def test_setup_rejects_invalid_counts(count):
    with pytest.raises(InvalidCompetitorCountError):
        Race.setup(count, rules=fast_rules())


def test_interrupted_race_propagates_the_failure():
    race = Race.setup(3, rules=fast_rules(total_distance=100_000), seed=9)
    race.interrupt()

    with pytest.raises(CompetitorFailedError):
        race.run()
    for racer in race.competitors:
        racer.join(timeout=5)
        assert not racer.running


def test_bonus_zone_is_used_during_a_race():
    """A zone covering the whole track grants the bonus on every step."""
    rules = fast_rules(total_distance=1000, bonus_width=999, bonus_distance=100)
    race = Race.setup(4, rules=rules, seed=11)
    result = race.run()

    assert sorted(result.finish_order) == ["c1", "c2", "c3", "c4"]
    # At most 10 steps: each one adds velocity plus the bonus
    for racer in race.competitors:
        assert racer.current_position() < 1000 + 100 + 3 + 1
