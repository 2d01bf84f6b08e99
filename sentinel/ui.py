"""Rich UI components for terminal interface"""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .models import ActivityEvent, EventKind, InactivityConfig, SessionState, TrackerPhase


console = Console()

_PHASE_STYLES = {
    TrackerPhase.IDLE: "[dim]⏸  Idle[/dim]",
    TrackerPhase.ACTIVE: "[green]⏱️  Active[/green]",
    TrackerPhase.WARNED: "[yellow]⚠  Warning issued[/yellow]",
    TrackerPhase.PAUSED: "[cyan]⏸  Backgrounded[/cyan]",
    TrackerPhase.TIMED_OUT: "[red]⏰ Timed out[/red]",
}

_EVENT_STYLES = {
    EventKind.STARTED: "green",
    EventKind.ACTIVITY_DETECTED: "cyan",
    EventKind.WARNING: "yellow",
    EventKind.TIMEOUT: "bold red",
}


def format_duration(seconds: Optional[float]) -> str:
    """Format seconds as 1h02m, 5m07s or 42s"""
    if seconds is None:
        return "-"

    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    if hours:
        return f"{hours}h{minutes:02d}m"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def print_error(message: str):
    """Print error message"""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str):
    """Print success message"""
    console.print(f"[bold green]✓[/bold green] {message}")


def print_info(message: str):
    """Print info message"""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str):
    """Print warning message"""
    console.print(f"[yellow]⚠[/yellow] {message}")


def create_countdown_display(
    state: SessionState,
    config: InactivityConfig,
    remaining_seconds: Optional[int]
) -> Panel:
    """Create live countdown panel for the watched session"""
    timeout = config.timeout_seconds
    remaining = remaining_seconds if remaining_seconds is not None else 0
    idle = max(0.0, timeout - remaining) if remaining_seconds is not None else 0.0
    progress_pct = min(100, (idle / timeout) * 100) if timeout > 0 else 0

    # Create progress bar
    bar_width = 40
    filled = int((progress_pct / 100) * bar_width)
    bar = "█" * filled + "░" * (bar_width - filled)

    phase = state.phase
    bar_style = "yellow" if phase is TrackerPhase.WARNED else "cyan"

    lines = [
        _PHASE_STYLES[phase],
        f"[{bar_style}]{bar}[/{bar_style}]",
        f"Idle {format_duration(idle)} | {format_duration(remaining_seconds)} until timeout",
    ]

    if config.warning_threshold is not None:
        lines.append(f"[dim]Warning {format_duration(config.warning_threshold.total_seconds())} before timeout[/dim]")

    lines.extend([
        "",
        "[dim]Enter = activity · b = background/foreground · q = quit[/dim]"
    ])

    return Panel(
        "\n".join(lines),
        box=box.DOUBLE,
        border_style=bar_style,
        title="Session Inactivity",
        title_align="left"
    )


def display_inactivity_warning(seconds_remaining: int):
    """Display the one-time warning before timeout"""
    console.print("\n")
    panel = Panel(
        f"[yellow]You will be signed out in {seconds_remaining} seconds due to inactivity[/yellow]\n\n"
        "Press Enter to extend the session",
        box=box.ROUNDED,
        border_style="yellow",
        title="⚠️  Inactivity Warning"
    )
    console.print(panel)


def display_session_expired(idle_seconds: int):
    """Display timeout notification"""
    console.print("\n")
    panel = Panel(
        f"[red]Session expired after {format_duration(idle_seconds)} without activity[/red]\n\nPlease sign in again",
        box=box.ROUNDED,
        border_style="red",
        title="Session Expired"
    )
    console.print(panel)


def display_background_change(paused: bool):
    """Display lifecycle transition message"""
    if paused:
        print_info("Backgrounded: checks paused, idle time keeps counting")
    else:
        print_info("Foregrounded: idle time reconciled")


def create_event_timeline(rows: List[Tuple[float, ActivityEvent]], title: str = "Event Timeline") -> Table:
    """
    Build a table of events with their offsets from the start of a run

    Args:
        rows: (seconds since start, event) pairs in emission order
        title: Table title
    """
    table = Table(title=title, show_header=True, box=box.ROUNDED)
    table.add_column("t", style="dim", justify="right")
    table.add_column("Event", style="white")
    table.add_column("Remaining", style="yellow", justify="right")

    for offset, event in rows:
        style = _EVENT_STYLES[event.kind]
        remaining = f"{event.seconds_remaining}s" if event.seconds_remaining is not None else ""
        table.add_row(f"{offset:.0f}s", f"[{style}]{event.describe()}[/{style}]", remaining)

    return table


def display_event_timeline(rows: List[Tuple[float, ActivityEvent]], title: str = "Event Timeline"):
    """Display events produced by a run"""
    if not rows:
        console.print("[dim]No events[/dim]")
        return

    console.print(create_event_timeline(rows, title))


def display_config(config: InactivityConfig, tracking_enabled: bool, log_path: Optional[str] = None):
    """Display effective configuration"""
    console.print("[bold]Configuration:[/bold]")
    console.print(f"Timeout: {format_duration(config.timeout_seconds)}")

    if config.warning_threshold is not None:
        console.print(f"Warning: {format_duration(config.warning_threshold.total_seconds())} before timeout")
    else:
        console.print("Warning: disabled")

    console.print(f"Activity spacing: {config.min_activity_spacing.total_seconds():g}s")
    console.print(f"Tracking enabled: {'yes' if tracking_enabled else 'no'}")
    console.print(f"Log file: {log_path or 'default'}")
