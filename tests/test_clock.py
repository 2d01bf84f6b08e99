import asyncio
from datetime import timedelta, timezone

from sentinel.clock import ManualClock, SystemClock


def test_system_clock_is_utc():
    now = SystemClock().now()

    assert now.tzinfo is timezone.utc
    assert now.utcoffset() == timedelta(0)


def test_manual_clock_starts_timezone_aware():
    assert ManualClock().now().tzinfo is timezone.utc


def test_advance_wakes_sleepers_in_deadline_order(clock):
    woken = []

    async def sleeper(name, seconds):
        await clock.sleep(seconds)
        woken.append((name, clock.now()))

    async def scenario():
        start = clock.now()
        tasks = [
            asyncio.ensure_future(sleeper('late', 5)),
            asyncio.ensure_future(sleeper('early', 2)),
        ]
        await clock.settle()
        assert clock.next_deadline() == start + timedelta(seconds=2)

        await clock.advance(3)
        assert [name for name, _ in woken] == ['early']
        assert clock.pending_sleepers == 1

        await clock.advance(10)
        await asyncio.gather(*tasks)
        return start

    start = asyncio.run(scenario())

    assert woken == [
        ('early', start + timedelta(seconds=2)),
        ('late', start + timedelta(seconds=5)),
    ]
    assert clock.now() == start + timedelta(seconds=13)
