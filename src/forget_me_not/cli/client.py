# src/forget_me_not/cli/client.py

"""
fmn: command line client for fmn-daemon.

    fmn add "stand up" after 45m
    fmn add "standup meeting" at 9:30 --per-day
    fmn add "drink water" per 1h -s ~/sounds/ding.wav
    fmn list
    fmn rm <task_id>

Input is validated here; the daemon only ever sees well-formed clocks.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..config import Settings, get_settings
from ..core.timeparse import local_now, parse_at, parse_hour_minute, parse_positive_duration
from ..daemon.client import DaemonUnreachable, send_request
from ..daemon.protocol import Request, Response, ResponseKind
from ..errors import ConfigurationError, ProtocolError
from ..logging_setup import setup_client_logging
from ..tasks.task_models import Once, OncePerDay, Period, Task

EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fmn", description="forget-me-not reminder client")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Schedule a new reminder")
    add.add_argument("description", help="Text shown in the notification")
    add.add_argument("-i", "--image-path", default=None, help="Notification icon")
    add.add_argument("-s", "--sound-path", default=None, help="16-bit WAV played on fire")
    when = add.add_subparsers(dest="when", required=True)

    after = when.add_parser("after", help="Fire once after a delay, e.g. 1h30m")
    after.add_argument("duration")

    at = when.add_parser("at", help="Fire once at HH:MM (today or tomorrow)")
    at.add_argument("time")
    at.add_argument("-p", "--per-day", action="store_true", help="Fire every day at HH:MM")

    per = when.add_parser("per", help="Fire every DURATION, e.g. 20m")
    per.add_argument("duration")

    rm = sub.add_parser("rm", help="Cancel a reminder")
    rm.add_argument("task_id")

    sub.add_parser("list", help="List scheduled reminders")

    return parser


def build_request(args: argparse.Namespace, settings: Settings) -> Request:
    """Translate parsed arguments into a Request; raises ConfigurationError."""
    if args.command == "rm":
        return Request.cancel(args.task_id)
    if args.command == "list":
        return Request.show()

    if args.when == "after":
        delay = parse_positive_duration(args.duration)
        try:
            clock = Once(local_now() + delay)
        except OverflowError as e:
            raise ConfigurationError(f"duration {args.duration!r} is too far in the future") from e
    elif args.when == "at" and args.per_day:
        hour, minute = parse_hour_minute(args.time)
        clock = OncePerDay(hour, minute)
    elif args.when == "at":
        clock = Once(parse_at(args.time))
    else:
        clock = Period(parse_positive_duration(args.duration))

    return Request.add(
        args.description,
        clock,
        image=args.image_path or settings.image_path,
        sound=args.sound_path or settings.sound_path,
    )


def render_tasks(tasks: Sequence[Task], console: Console) -> None:
    table = Table()
    table.add_column("ID")
    table.add_column("TYPE")
    table.add_column("DESCRIPTION")
    for task in tasks:
        table.add_row(task.task_id, task.clock.describe(), task.description)
    console.print(table)


def render_response(response: Response, console: Console) -> None:
    if response.kind == ResponseKind.TASKS:
        render_tasks(response.tasks, console)
    elif response.kind == ResponseKind.ADD_SUCCESS and response.task is not None:
        task = response.task
        console.print(f"success: added {task.task_id} ({task.clock.describe()})")
    elif response.kind == ResponseKind.REMOVE_SUCCESS:
        console.print(f"success: removed {response.message or ''}".rstrip())
    else:
        console.print(f"failed: {response.message or 'unknown error'}")


def main(argv: Sequence[str] | None = None) -> int:
    setup_client_logging()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    console = Console()
    err = Console(stderr=True)

    try:
        request = build_request(args, settings)
    except ConfigurationError as e:
        err.print(f"invalid input: {e}")
        return EXIT_USAGE

    try:
        response = send_request(
            request,
            settings.daemon_host,
            settings.daemon_port,
            timeout=settings.connect_timeout,
        )
    except (DaemonUnreachable, ProtocolError) as e:
        err.print(f"request {request.kind.value!r} failed: {e}")
        return EXIT_FAILURE

    render_response(response, console)
    return 0 if response.ok else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
