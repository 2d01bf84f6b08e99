from datetime import datetime, timedelta, timezone

import pytest

from sentinel.throttle import ActivityThrottle


class SteppingClock:
    def __init__(self):
        self.current = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def now(self):
        return self.current

    def step(self, seconds):
        self.current += timedelta(seconds=seconds)


def test_interactions_inside_spacing_are_dropped():
    clock = SteppingClock()
    throttle = ActivityThrottle(timedelta(seconds=1), clock)

    assert throttle.should_forward()
    clock.step(0.5)
    assert not throttle.should_forward()
    clock.step(0.5)
    assert throttle.should_forward()

    assert throttle.dropped == 1
    assert throttle.last_forwarded == clock.now()


def test_wrap_only_records_forwarded_interactions():
    clock = SteppingClock()
    throttle = ActivityThrottle(timedelta(seconds=2), clock)
    recorded = []
    forward = throttle.wrap(lambda: recorded.append(clock.now()))

    for _ in range(5):
        forward()
        clock.step(1)

    assert len(recorded) == 3


def test_zero_spacing_forwards_everything():
    throttle = ActivityThrottle(timedelta(0), SteppingClock())

    assert all(throttle.should_forward() for _ in range(3))


def test_reset_forgets_history():
    throttle = ActivityThrottle(timedelta(seconds=10), SteppingClock())
    throttle.should_forward()
    throttle.should_forward()

    throttle.reset()

    assert throttle.dropped == 0
    assert throttle.should_forward()


def test_negative_spacing_is_rejected():
    with pytest.raises(ValueError):
        ActivityThrottle(timedelta(seconds=-1))
