import pytest

from derbysim.engine.clock import RaceClock
from tests.test_utils import make_track


@pytest.fixture
def clock():
    return RaceClock(time_unit=0.0)


@pytest.fixture
def track(clock):
    """Factory fixture to create tracks sharing the test clock."""

    def _builder(**kwargs):
        kwargs.setdefault("clock", clock)
        return make_track(**kwargs)

    return _builder
