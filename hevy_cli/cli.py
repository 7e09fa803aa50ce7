"""Command-line interface for the Hevy API."""

import argparse
import asyncio
import locale
import logging
import os
import sys
from typing import Optional

import httpx
from dotenv import load_dotenv
from rich.logging import RichHandler
from rich.markup import escape

from hevy_cli import __version__
from hevy_cli.client import HevyClient, get_count, get_list
from hevy_cli.config import (
    MISSING_KEY_MESSAGE,
    clear_api_key,
    get_config_file,
    require_api_key,
    resolve_api_key,
    set_api_key,
)
from hevy_cli.exceptions import HevyCLIError, MissingAPIKeyError
from hevy_cli.models import ExerciseView, RoutineView, WorkoutView
from hevy_cli.ui import (
    OutputOptions,
    PLACEHOLDER,
    Spinner,
    cell,
    console,
    err_console,
    field_table,
    format_date,
    highlight,
    make_table,
    mask_key,
    muted,
    output_error,
    output_json,
)

BASE_URL_ENV = "HEVY_BASE_URL"

# Failures a command reports instead of crashing
COMMAND_ERRORS = (HevyCLIError, httpx.HTTPError, OSError, ValueError)

_LOGGER = logging.getLogger(__name__)


def to_number(value, fallback: int) -> int:
    """Parse a page option, falling back to the default when it is not a number."""
    if value is None or value == "":
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def resolve_base_url(args) -> Optional[str]:
    """Resolve the API base URL from CLI or environment variables."""
    return getattr(args, "base_url", None) or os.getenv(BASE_URL_ENV)


def create_client(api_key: str, base_url: Optional[str] = None) -> HevyClient:
    return HevyClient(api_key=api_key, base_url=base_url)


async def fetch(args, path: str, query: Optional[dict] = None):
    """Issue a single authenticated GET request."""
    credential = require_api_key()
    async with create_client(credential.api_key, resolve_base_url(args)) as client:
        return await client.get(path, query)


async def cmd_auth_set(args, opts: OutputOptions) -> int:
    """Store an API key in the config file."""
    try:
        path = set_api_key(args.api_key)
    except COMMAND_ERRORS as e:
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"saved": True, "configPath": str(path)})
    else:
        console.print(f"{highlight('Saved')}: {escape(str(path))}")
        console.print(f"{highlight('Key')}: {mask_key(args.api_key)}")
    return 0


async def cmd_auth_show(args, opts: OutputOptions) -> int:
    """Show the active API key and where it came from."""
    try:
        credential = resolve_api_key()
        if not credential.api_key:
            raise MissingAPIKeyError(MISSING_KEY_MESSAGE)
    except COMMAND_ERRORS as e:
        output_error(e, opts)
        return 1

    masked = mask_key(credential.api_key)
    if opts.json:
        output_json(
            {"apiKey": credential.api_key, "masked": masked, "source": credential.source.value}
        )
    else:
        console.print(f"{highlight('Key')}: {masked} {muted(f'({credential.source.value})')}")
    return 0


async def cmd_auth_clear(args, opts: OutputOptions) -> int:
    """Remove the stored API key."""
    try:
        path = clear_api_key()
    except COMMAND_ERRORS as e:
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"cleared": True})
    else:
        console.print(f"{highlight('Cleared')}: {escape(str(path))}")
    return 0


async def cmd_workouts_list(args, opts: OutputOptions) -> int:
    """List one page of workouts."""
    spinner = Spinner("Fetching workouts...", opts).start()
    try:
        page = to_number(args.page, 1)
        page_size = to_number(args.page_size, 10)
        response = await fetch(args, "/workouts", {"page": page, "pageSize": page_size})
        items = get_list(response)
        workouts = [WorkoutView.model_validate(raw) for raw in items]
    except COMMAND_ERRORS as e:
        spinner.fail("Failed to fetch workouts")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"page": page, "pageSize": page_size, "workouts": items})
        return 0

    spinner.succeed(f"Loaded {len(items)} workouts")
    table = make_table(None, ["ID", "Title", "Start", "Duration"])
    for workout in workouts:
        table.add_row(
            cell(workout.id),
            cell(workout.title),
            format_date(workout.start),
            cell(workout.duration),
        )
    console.print(table)
    return 0


async def show_record(args, opts: OutputOptions, path: str, label: str) -> int:
    """Fetch a single record and print every field it carries."""
    spinner = Spinner(f"Fetching {label}...", opts).start()
    try:
        response = await fetch(args, path)
    except COMMAND_ERRORS as e:
        spinner.fail(f"Failed to fetch {label}")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json(response)
        return 0

    spinner.succeed(f"{label.capitalize()} loaded")
    if isinstance(response, dict):
        console.print(field_table(response))
    else:
        console.print(escape(str(response)))
    return 0


async def cmd_workouts_show(args, opts: OutputOptions) -> int:
    """Show a single workout."""
    return await show_record(args, opts, f"/workouts/{args.id}", "workout")


async def cmd_workouts_count(args, opts: OutputOptions) -> int:
    """Show the total number of workouts."""
    spinner = Spinner("Counting workouts...", opts).start()
    try:
        count = get_count(await fetch(args, "/workouts/count"))
    except COMMAND_ERRORS as e:
        spinner.fail("Failed to count workouts")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"count": count})
    else:
        spinner.succeed("Workouts counted")
        console.print(f"{highlight('Total')}: {escape(str(count))}")
    return 0


async def list_exercises(
    args,
    opts: OutputOptions,
    *,
    page,
    page_size,
    query: Optional[str],
) -> int:
    """Fetch a page of exercises, optionally filtered by name."""
    spinner = Spinner("Fetching exercises...", opts).start()
    try:
        page = to_number(page, 1)
        page_size = to_number(page_size, 25)
        response = await fetch(args, "/exercises", {"page": page, "pageSize": page_size})
        items = get_list(response)
        if query:
            needle = query.lower()
            items = [
                exercise
                for exercise in items
                if isinstance(exercise, dict)
                and needle in str(exercise.get("name") or "").lower()
            ]
        exercises = [ExerciseView.model_validate(raw) for raw in items]
    except COMMAND_ERRORS as e:
        spinner.fail("Failed to fetch exercises")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"page": page, "pageSize": page_size, "exercises": items})
        return 0

    spinner.succeed(f"Loaded {len(items)} exercises")
    table = make_table(None, ["ID", "Name", "Muscle", "Equipment"])
    for exercise in exercises:
        table.add_row(
            cell(exercise.id),
            cell(exercise.name),
            cell(exercise.muscle),
            cell(exercise.equipment),
        )
    console.print(table)
    return 0


async def cmd_exercises_list(args, opts: OutputOptions) -> int:
    """List exercises from the catalog."""
    return await list_exercises(
        args, opts, page=args.page, page_size=args.page_size, query=args.query
    )


async def cmd_exercises_search(args, opts: OutputOptions) -> int:
    """Search the first catalog page by exercise name."""
    return await list_exercises(args, opts, page=1, page_size=50, query=args.query)


async def cmd_routines_list(args, opts: OutputOptions) -> int:
    """List one page of routines."""
    spinner = Spinner("Fetching routines...", opts).start()
    try:
        page = to_number(args.page, 1)
        page_size = to_number(args.page_size, 10)
        response = await fetch(args, "/routines", {"page": page, "pageSize": page_size})
        items = get_list(response)
        routines = [RoutineView.model_validate(raw) for raw in items]
    except COMMAND_ERRORS as e:
        spinner.fail("Failed to fetch routines")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"page": page, "pageSize": page_size, "routines": items})
        return 0

    spinner.succeed(f"Loaded {len(items)} routines")
    table = make_table(None, ["ID", "Title", "Updated"])
    for routine in routines:
        table.add_row(cell(routine.id), cell(routine.title), format_date(routine.updated))
    console.print(table)
    return 0


async def cmd_routines_show(args, opts: OutputOptions) -> int:
    """Show a single routine."""
    return await show_record(args, opts, f"/routines/{args.id}", "routine")


async def cmd_stats(args, opts: OutputOptions) -> int:
    """Summary snapshot: workout total plus the most recent workout."""
    spinner = Spinner("Building stats...", opts).start()
    try:
        credential = require_api_key()
        async with create_client(credential.api_key, resolve_base_url(args)) as client:
            count_response, workouts_response = await asyncio.gather(
                client.get("/workouts/count"),
                client.get("/workouts", {"page": 1, "pageSize": 3}),
            )
        workouts_count = get_count(count_response)
        workouts = get_list(workouts_response)
        latest = workouts[0] if workouts else None
        latest_view = WorkoutView.model_validate(latest) if latest is not None else None
    except COMMAND_ERRORS as e:
        spinner.fail("Failed to load stats")
        output_error(e, opts)
        return 1

    if opts.json:
        output_json({"workoutsCount": workouts_count, "latestWorkout": latest})
        return 0

    spinner.succeed("Stats ready")
    table = make_table(None, ["Metric", "Value"])
    table.add_row("Workouts", escape(str(workouts_count)))
    if latest_view is not None:
        title = latest_view.title if "title" in latest_view.model_fields_set else "Workout"
        table.add_row("Latest", cell(title))
        table.add_row("Latest Date", format_date(latest_view.start))
    else:
        table.add_row("Latest", PLACEHOLDER)
        table.add_row("Latest Date", PLACEHOLDER)
    console.print(table)
    return 0


def setup_logging(verbose: bool):
    """Send log records to stderr through Rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    # Flags repeated on every subparser so they work after the subcommand too.
    # SUPPRESS keeps a subparser from resetting a value given before it.
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument(
        "--json", action="store_true", default=argparse.SUPPRESS, help="Output machine-readable JSON"
    )
    common_parser.add_argument(
        "--base-url", default=argparse.SUPPRESS, help=f"API base URL (env: {BASE_URL_ENV})"
    )
    common_parser.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging"
    )

    parser = argparse.ArgumentParser(
        prog="hevy",
        description="CLI for the Hevy workout tracking API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    parser.add_argument("--base-url", help=f"API base URL (env: {BASE_URL_ENV})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # auth
    auth_parser = subparsers.add_parser("auth", help="Manage API keys", parents=[common_parser])
    auth_subparsers = auth_parser.add_subparsers(dest="auth_command", required=True)

    auth_set_parser = auth_subparsers.add_parser(
        "set", help="Store API key", parents=[common_parser]
    )
    auth_set_parser.add_argument("api_key", metavar="api-key", help="Hevy API key (UUID)")
    auth_set_parser.set_defaults(func=cmd_auth_set)

    auth_show_parser = auth_subparsers.add_parser(
        "show", help="Show current API key", parents=[common_parser]
    )
    auth_show_parser.set_defaults(func=cmd_auth_show)

    auth_clear_parser = auth_subparsers.add_parser(
        "clear", help="Remove stored API key", parents=[common_parser]
    )
    auth_clear_parser.set_defaults(func=cmd_auth_clear)

    # workouts
    workouts_parser = subparsers.add_parser(
        "workouts", help="Workout operations", parents=[common_parser]
    )
    workouts_subparsers = workouts_parser.add_subparsers(dest="workouts_command", required=True)

    workouts_list_parser = workouts_subparsers.add_parser(
        "list", help="List workouts", parents=[common_parser]
    )
    workouts_list_parser.add_argument("-p", "--page", default="1", help="Page number (default: 1)")
    workouts_list_parser.add_argument(
        "-s", "--page-size", default="10", help="Page size (default: 10)"
    )
    workouts_list_parser.set_defaults(func=cmd_workouts_list)

    workouts_show_parser = workouts_subparsers.add_parser(
        "show", help="Show workout details", parents=[common_parser]
    )
    workouts_show_parser.add_argument("id", help="Workout ID")
    workouts_show_parser.set_defaults(func=cmd_workouts_show)

    workouts_count_parser = workouts_subparsers.add_parser(
        "count", help="Count workouts", parents=[common_parser]
    )
    workouts_count_parser.set_defaults(func=cmd_workouts_count)

    # exercises
    exercises_parser = subparsers.add_parser(
        "exercises", help="Exercise catalog", parents=[common_parser]
    )
    exercises_subparsers = exercises_parser.add_subparsers(
        dest="exercises_command", required=True
    )

    exercises_list_parser = exercises_subparsers.add_parser(
        "list", help="List exercises", parents=[common_parser]
    )
    exercises_list_parser.add_argument("-p", "--page", default="1", help="Page number (default: 1)")
    exercises_list_parser.add_argument(
        "-s", "--page-size", default="25", help="Page size (default: 25)"
    )
    exercises_list_parser.add_argument("-q", "--query", help="Filter by name")
    exercises_list_parser.set_defaults(func=cmd_exercises_list)

    exercises_search_parser = exercises_subparsers.add_parser(
        "search", help="Search exercises by name", parents=[common_parser]
    )
    exercises_search_parser.add_argument("query", help="Search query")
    exercises_search_parser.set_defaults(func=cmd_exercises_search)

    # routines
    routines_parser = subparsers.add_parser(
        "routines", help="Routine library", parents=[common_parser]
    )
    routines_subparsers = routines_parser.add_subparsers(dest="routines_command", required=True)

    routines_list_parser = routines_subparsers.add_parser(
        "list", help="List routines", parents=[common_parser]
    )
    routines_list_parser.add_argument("-p", "--page", default="1", help="Page number (default: 1)")
    routines_list_parser.add_argument(
        "-s", "--page-size", default="10", help="Page size (default: 10)"
    )
    routines_list_parser.set_defaults(func=cmd_routines_list)

    routines_show_parser = routines_subparsers.add_parser(
        "show", help="Show routine details", parents=[common_parser]
    )
    routines_show_parser.add_argument("id", help="Routine ID")
    routines_show_parser.set_defaults(func=cmd_routines_show)

    # stats
    stats_parser = subparsers.add_parser("stats", help="Summary snapshot", parents=[common_parser])
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None):
    """Main entry point for CLI."""
    load_dotenv()
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error:
        _LOGGER.debug("System locale unavailable, using default date format")

    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    opts = OutputOptions(json=args.json)

    sys.exit(asyncio.run(args.func(args, opts)))


if __name__ == "__main__":
    main()
