from datetime import datetime, timezone

import pytest
from rich.console import Console

from sentinel import ui
from sentinel.models import ActivityEvent, InactivityConfig, SessionState


def render(renderable) -> str:
    console = Console(record=True, width=100)
    console.print(renderable)
    return console.export_text()


@pytest.mark.parametrize('seconds, expected', [
    (None, '-'),
    (0, '0s'),
    (42, '42s'),
    (307, '5m07s'),
    (3720, '1h02m'),
    (-4, '0s'),
])
def test_format_duration(seconds, expected):
    assert ui.format_duration(seconds) == expected


def test_countdown_display_shows_remaining_time():
    state = SessionState(timer_active=True, last_activity_at=datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc))
    policy = InactivityConfig.from_seconds(600, warning=60)

    text = render(ui.create_countdown_display(state, policy, 420))

    assert "Session Inactivity" in text
    assert "Active" in text
    assert "Idle 3m00s | 7m00s until timeout" in text
    assert "Warning 1m00s before timeout" in text


def test_countdown_display_without_live_window():
    text = render(ui.create_countdown_display(SessionState(), InactivityConfig(), None))

    assert "Idle" in text
    assert "- until timeout" in text


def test_event_timeline_rows():
    rows = [
        (0.0, ActivityEvent.started()),
        (5.0, ActivityEvent.warning(5)),
        (10.0, ActivityEvent.timeout()),
    ]

    table = ui.create_event_timeline(rows)
    text = render(table)

    assert table.row_count == 3
    assert "warning (5s remaining)" in text
    assert "timeout" in text
