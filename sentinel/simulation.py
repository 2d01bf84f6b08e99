"""Deterministic replay of host activity scripts on a manual clock"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Tuple

from .clock import ManualClock
from .engine import InactivityEngine
from .models import ActivityEvent, InactivityConfig


@dataclass
class ScriptStep:
    """Host operation performed at an offset from the start of a run"""
    at: float
    action: str  # 'activity', 'background', 'foreground', 'stop', 'start'

    ACTIONS = ('activity', 'background', 'foreground', 'stop', 'start')

    def __post_init__(self):
        if self.action not in self.ACTIONS:
            raise ValueError(f"Unknown action: {self.action}")
        if self.at < 0:
            raise ValueError(f"Step offset cannot be negative: {self.at}")


@dataclass
class SimulationResult:
    """Events produced by a replay"""
    events: List[Tuple[float, ActivityEvent]] = field(default_factory=list)

    def kinds(self) -> List[str]:
        return [event.kind.value for _, event in self.events]


def parse_background(value: str) -> List[ScriptStep]:
    """
    Parse a background span given as START:DURATION in seconds

    Returns:
        The background and foreground steps for the span
    """
    try:
        start, duration = (float(part) for part in value.split(':'))
    except ValueError:
        raise ValueError(f"Invalid background span: {value}. Expected START:DURATION")

    if duration < 0:
        raise ValueError(f"Background duration cannot be negative: {value}")

    return [ScriptStep(start, 'background'), ScriptStep(start + duration, 'foreground')]


async def simulate_session(
    config: InactivityConfig,
    steps: List[ScriptStep],
    duration: float
) -> SimulationResult:
    """
    Start a window at t=0, replay steps in time order and run until duration

    Args:
        config: Inactivity policy
        steps: Host operations to perform
        duration: Seconds of simulated time to cover

    Returns:
        Every event emitted, with its offset from the start
    """
    clock = ManualClock()
    start = clock.now()
    result = SimulationResult()

    async with InactivityEngine(config, clock) as engine:
        subscription = engine.events()

        def collect():
            nonlocal subscription
            for event in subscription.pending():
                offset = (event.at - start) / timedelta(seconds=1) if event.at else 0.0
                result.events.append((offset, event))
            if subscription.finished:
                subscription = engine.events()

        operations = {
            'activity': engine.record_activity,
            'background': engine.pause_for_background,
            'foreground': engine.resume,
            'stop': engine.stop_timer,
            'start': engine.start_timer,
        }

        engine.start_timer()
        collect()

        for step in sorted(steps, key=lambda s: s.at):
            if step.at > duration:
                break
            await clock.advance_to(start + timedelta(seconds=step.at))
            collect()
            operations[step.action]()
            collect()

        await clock.advance_to(start + timedelta(seconds=duration))
        collect()

    return result
