import asyncio

import pytest

from sentinel.scheduling import CheckScheduler, next_poll_interval, seconds_remaining


@pytest.mark.parametrize('remaining, expected', [
    (-3, 1),
    (0, 1),
    (10, 1),
    (9.5, 1),
    (10.5, 5),
    (10.9, 5),
    (11, 5),
    (60, 5),
    (61, 30),
    (300, 30),
    (301, 60),
    (600, 60),
    (601, 300),
    (1800, 300),
])
def test_poll_interval_shrinks_near_deadline(remaining, expected):
    assert next_poll_interval(remaining) == expected


def test_seconds_remaining_rounds_up():
    assert seconds_remaining(10, 5) == 5
    assert seconds_remaining(10, 5.2) == 5
    assert seconds_remaining(10, 12) == 0


def test_arming_supersedes_pending_check(clock):
    fired = []

    async def scenario():
        scheduler = CheckScheduler(clock, fired.append)
        first = scheduler.arm(5)
        second = scheduler.arm(1)
        assert second != first

        await clock.advance(10)
        return second

    second = asyncio.run(scenario())

    assert fired == [second]


def test_cancel_releases_the_delay(clock):
    fired = []

    async def scenario():
        scheduler = CheckScheduler(clock, fired.append)
        scheduler.arm(3)
        await clock.settle()
        assert scheduler.pending
        assert clock.pending_sleepers == 1

        scheduler.cancel()
        await clock.settle()
        assert not scheduler.pending
        assert clock.pending_sleepers == 0

        await clock.advance(5)

    asyncio.run(scenario())

    assert fired == []


def test_generation_is_current_only_until_next_arm(clock):
    async def scenario():
        scheduler = CheckScheduler(clock, lambda generation: None)
        generation = scheduler.arm(1)
        assert scheduler.is_current(generation)

        scheduler.arm(1)
        assert not scheduler.is_current(generation)
        scheduler.cancel()

    asyncio.run(scenario())
