#!/usr/bin/env python3
"""Inactivity Sentinel - Main CLI Entry Point"""

import sys
import asyncio
import argparse
import threading

from rich.live import Live

from sentinel.config import config, parse_duration
from sentinel.engine import InactivityEngine
from sentinel.models import EventKind, InactivityConfig
from sentinel.simulation import ScriptStep, parse_background, simulate_session
from sentinel.throttle import ActivityThrottle
from sentinel import logger as app_logger
from sentinel import ui


console = ui.console
logger = app_logger.get_logger()


class SentinelCLI:
    """Main CLI application"""

    def __init__(self):
        self.backgrounded = False

    def run(self, args):
        """Main entry point"""
        parser = self.create_parser()
        parsed_args = parser.parse_args(args)

        if not hasattr(parsed_args, 'func'):
            parser.print_help()
            return

        parsed_args.func(parsed_args)

    def create_parser(self):
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description='Inactivity Sentinel - session timeout tracking',
            prog='inactivity'
        )

        subparsers = parser.add_subparsers(title='commands', dest='command')

        watch_parser = subparsers.add_parser('watch', help='Track a live session')
        self._add_policy_arguments(watch_parser)
        watch_parser.set_defaults(func=self.cmd_watch)

        simulate_parser = subparsers.add_parser('simulate', help='Replay an idle session on a simulated clock')
        self._add_policy_arguments(simulate_parser)
        simulate_parser.add_argument('--duration', type=float, help='Seconds to simulate (default: timeout + 5)')
        simulate_parser.add_argument(
            '--activity', type=float, action='append', default=[], metavar='T',
            help='Record activity at T seconds (repeatable)'
        )
        simulate_parser.add_argument(
            '--background', action='append', default=[], metavar='START:DURATION',
            help='Background the session for DURATION seconds at START (repeatable)'
        )
        simulate_parser.set_defaults(func=self.cmd_simulate)

        config_parser = subparsers.add_parser('config', help='Show configuration')
        config_parser.set_defaults(func=self.cmd_config)

        return parser

    def _add_policy_arguments(self, parser):
        parser.add_argument('--timeout', help='Inactivity timeout, e.g. 90s or 15m')
        parser.add_argument('--warning', help='Warning lead time before timeout, e.g. 30s')

    def build_policy(self, args) -> InactivityConfig:
        """Combine configured policy with command line overrides"""
        timeout = parse_duration(args.timeout) if args.timeout else config.timeout
        warning = parse_duration(args.warning) if args.warning else config.warning_threshold

        return InactivityConfig(
            timeout=timeout,
            warning_threshold=warning,
            min_activity_spacing=config.activity_spacing
        )

    # Command implementations

    def cmd_config(self, args):
        """Show configuration"""
        ui.display_config(
            config.inactivity_config(),
            config.tracking_enabled,
            str(config.log_path) if config.log_path else None
        )

    def cmd_simulate(self, args):
        """Replay a scripted session"""
        policy = self.build_policy(args)
        duration = args.duration if args.duration is not None else policy.timeout_seconds + 5

        steps = [ScriptStep(at, 'activity') for at in args.activity]
        for span in args.background:
            steps.extend(parse_background(span))

        result = asyncio.run(simulate_session(policy, steps, duration))

        ui.print_info(
            f"Simulated {ui.format_duration(duration)} with timeout "
            f"{ui.format_duration(policy.timeout_seconds)}"
        )
        ui.display_event_timeline(result.events)

    def cmd_watch(self, args):
        """Track a live session until it times out or the user quits"""
        policy = self.build_policy(args)
        ui.print_success(f"Watching session (timeout {ui.format_duration(policy.timeout_seconds)})")
        asyncio.run(self.watch_session(policy))

    # Live session

    async def watch_session(self, policy: InactivityConfig):
        """Drive the engine from keyboard input and render its state"""
        loop = asyncio.get_running_loop()
        commands: asyncio.Queue = asyncio.Queue()
        self._start_input_reader(loop, commands)

        throttle = ActivityThrottle(policy.min_activity_spacing)

        async with InactivityEngine(policy, tracking_enabled=config.tracking_enabled) as engine:
            subscription = engine.events()
            engine.start_timer()

            with Live(console=console, refresh_per_second=1, transient=False) as live:
                while True:
                    try:
                        command = await asyncio.wait_for(commands.get(), timeout=1)
                    except asyncio.TimeoutError:
                        command = None

                    if command in ('q', 'quit', 'exit'):
                        break

                    if command is not None:
                        self.handle_command(engine, throttle, command)

                    for event in subscription.pending():
                        if event.kind is EventKind.WARNING:
                            ui.display_inactivity_warning(event.seconds_remaining)
                        elif event.kind is EventKind.TIMEOUT:
                            ui.display_session_expired(engine.state.seconds_since_last_activity)
                            ui.print_info("Press Enter to sign in again, q to quit")

                    if subscription.finished:
                        subscription = engine.events()

                    live.update(ui.create_countdown_display(
                        engine.state,
                        engine.config,
                        engine.seconds_until_timeout()
                    ))

        ui.print_info("Stopped watching")

    def handle_command(self, engine: InactivityEngine, throttle: ActivityThrottle, command: str):
        """Apply one line of keyboard input to the engine"""
        if command == 'b':
            self.backgrounded = not self.backgrounded
            if self.backgrounded:
                engine.pause_for_background()
            else:
                engine.resume()
            ui.display_background_change(self.backgrounded)
            return

        if command == '':
            if self.backgrounded:
                # Interacting brings the session back to the foreground
                self.backgrounded = False
                engine.resume()
                ui.display_background_change(False)

            if throttle.should_forward():
                engine.record_activity()
            return

        ui.print_warning(f"Unknown input: {command}")

    def _start_input_reader(self, loop, commands: asyncio.Queue):
        """Forward stdin lines to the event loop from a daemon thread"""
        def read_lines():
            for line in sys.stdin:
                if loop.is_closed():
                    return
                loop.call_soon_threadsafe(commands.put_nowait, line.strip().lower())
            if not loop.is_closed():
                loop.call_soon_threadsafe(commands.put_nowait, 'q')

        threading.Thread(target=read_lines, name='stdin-reader', daemon=True).start()


def main():
    """Main entry point"""
    app_logger.configure(config.log_path, config.log_level)

    try:
        cli = SentinelCLI()
        cli.run(sys.argv[1:])
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(0)
    except ValueError as e:
        # Invalid durations or an inconsistent policy
        ui.print_error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected failure")
        ui.print_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
