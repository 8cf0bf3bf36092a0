"""
TMAC (Task Management API Client) command line.

Usage:
    tmac list                      # all todos
    tmac list -u 1 -c false        # pending todos of user 1
    tmac list -u 1 -o              # ... and export them to TMAC_EXPORT_PATH
    tmac list -o out/todos.json    # export to an explicit file
    tmac stat 1                    # statistics for user 1
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from . import __version__
from .client import APIClient
from .errors import InvariantViolation, ValidationError
from .models import TodoStatus, User
from .processing import calculate_statistics, filter_by_status
from .settings import Settings, get_settings
from .utils import write_json_export

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _fail(message: str) -> int:
    console.print(message, style="red", markup=False)
    return 1


def _parse_complete(value: Optional[str]) -> Optional[bool]:
    # unset / "true" / anything else
    if value is None:
        return None
    return value.strip().lower() == "true"


def _render_todos(todos: List) -> None:
    table = Table()
    table.add_column("Status", style="yellow")
    table.add_column("Title", style="green")
    for t in todos:
        table.add_row(t.status().value, Text(str(t.title)))
    console.print(table)


def cmd_list(args: argparse.Namespace, client: APIClient) -> int:
    """List todos, optionally for one user and filtered by completion."""
    try:
        result = client.fetch_todos_by_user_id(args.user) if args.user else client.fetch_todos()
    except ValidationError as e:
        return _fail(str(e))

    if not result.ok:
        return _fail(f"Error fetching todos: {result.error}")

    todos = result.value
    if args.user:
        console.print(f"Showing todos for user: {args.user}")

    complete = _parse_complete(args.complete)
    if complete is not None:
        console.print(f"Filtering by complete: {args.complete}")
        todos = filter_by_status(todos, TodoStatus.COMPLETE if complete else TodoStatus.PENDING)

    if not todos:
        who = f" for user {args.user}" if args.user else ""
        console.print(f"No todos found{who}. Try adjusting your filter")
        return 0

    _render_todos(todos)

    if args.output:
        path = write_json_export(args.output, todos)
        console.print(f"Exported {len(todos)} todo(s) to {path}")
    return 0


def cmd_stat(args: argparse.Namespace, client: APIClient) -> int:
    """Show task statistics for one user."""
    try:
        todos_result = client.fetch_todos_by_user_id(args.user)
    except ValidationError as e:
        return _fail(str(e))
    if not todos_result.ok:
        return _fail(f"Error fetching todos: {todos_result.error}")

    user_result = client.fetch_user_by_id(args.user)
    if not user_result.ok:
        return _fail(f"Error fetching user: {user_result.error}")

    user: User = user_result.value
    try:
        for todo in todos_result.value:
            user.add_todo(todo)
    except InvariantViolation as e:
        return _fail(f"Inconsistent data for user {args.user}: {e}")

    stats = calculate_statistics(user.todos)
    console.print(Text(f"Statistics for {user.name} ({user.email})"))
    table = Table()
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Total", str(stats.total))
    table.add_row("Completed", str(stats.completed))
    table.add_row("Pending", str(stats.pending))
    table.add_row("Completion rate", f"{user.completion_rate():.0%}")
    console.print(table)
    return 0


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmac",
        description="TMAC (Task Management API Client)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    p_list = subparsers.add_parser(
        "list", help="List todos. Will list todos for a user if a userId is specified"
    )
    p_list.add_argument("-u", "--user", default=None, help="filter todos by user")
    p_list.add_argument("-c", "--complete", default=None, help="filter todos by completion (true/false)")
    p_list.add_argument(
        "-o", "--output", nargs="?", const=settings.export_path, default=None,
        help=f"export the listed todos as JSON (default file: {settings.export_path})",
    )

    p_stat = subparsers.add_parser("stat", help="Show task statistics for a specified user")
    p_stat.add_argument("user", help="The user to show statistics for")

    return parser


# PUBLIC_INTERFACE
def main(argv: Optional[List[str]] = None, client: Optional[APIClient] = None) -> int:
    """Entry point for the `tmac` command. Returns the process exit code."""
    settings = get_settings()
    configure_logging(settings.log_level)

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    commands = {
        "list": cmd_list,
        "stat": cmd_stat,
    }
    if args.command not in commands:
        parser.print_help()
        return 0

    logger.debug("Running %s against %s", args.command, settings.base_url)
    if client is not None:
        return commands[args.command](args, client)
    with APIClient(base_url=settings.base_url, timeout=settings.timeout) as own_client:
        return commands[args.command](args, own_client)


if __name__ == "__main__":
    raise SystemExit(main())
