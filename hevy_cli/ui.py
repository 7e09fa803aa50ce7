"""Terminal output helpers: tables, JSON, errors and progress spinners."""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from pydantic import TypeAdapter
from rich.table import Table

PLACEHOLDER = "-"
MASK_CHAR = "•"

_DATETIME = TypeAdapter(datetime)

console = Console()
err_console = Console(stderr=True)


@dataclass(frozen=True)
class OutputOptions:
    """Output mode shared by every command."""

    json: bool = False


def output_json(payload: Any):
    """Print ``payload`` as indented JSON on stdout."""
    print(json.dumps(payload, indent=2, default=str))


def output_error(error: BaseException | str, opts: OutputOptions):
    """Report an error as ``{"error": ...}`` in JSON mode, or in red on stderr."""
    message = str(error)
    if opts.json:
        output_json({"error": message})
    else:
        err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)


def mask_key(key: str) -> str:
    """Hide most of an API key, keeping the first and last four characters."""
    if len(key) <= 8:
        return MASK_CHAR * max(4, len(key))
    return f"{key[:4]}{MASK_CHAR * 8}{key[-4:]}"


def _normalize_timestamp(ts: int | float) -> float:
    """Normalize timestamps that may be in milliseconds to seconds."""
    if ts > 1000000000000:
        return ts / 1000
    return float(ts)


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch number or datetime; ``None`` if it cannot."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(_normalize_timestamp(value))
        if isinstance(value, str):
            return _DATETIME.validate_python(value.strip())
    except (ValueError, OverflowError, OSError):
        return None
    return None


def format_date(value: Any) -> str:
    """Render a date-like value in the user's locale, or a placeholder."""
    if not value:
        return PLACEHOLDER
    parsed = parse_date(value)
    if parsed is None:
        return PLACEHOLDER
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%x %X")


def format_value(value: Any) -> str:
    """Render a single field value for a table cell."""
    if value is None:
        return PLACEHOLDER
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return json.dumps(value, default=str)


def cell(value: Any) -> str:
    """Table cell text for an optional value."""
    return escape(format_value(value))


def highlight(label: str) -> str:
    return f"[bold magenta]{label}[/bold magenta]"


def muted(value: str) -> str:
    return f"[dim]{value}[/dim]"


def make_table(title: Optional[str], columns: list[str]) -> Table:
    """Create a Rich table with cyan column headers."""
    table = Table(title=title, header_style="cyan")
    for name in columns:
        table.add_column(name)
    return table


def field_table(record: dict) -> Table:
    """Two-column Field/Value table over every key of ``record``."""
    table = make_table(None, ["Field", "Value"])
    for key, value in record.items():
        table.add_row(f"[cyan]{escape(str(key))}[/cyan]", escape(format_value(value)))
    return table


class Spinner:
    """Transient progress indicator on stderr, silent in JSON mode.

    Usage::

        spinner = Spinner("Fetching workouts...", opts).start()
        ...
        spinner.succeed("Loaded 3 workouts")
    """

    def __init__(self, message: str, opts: OutputOptions):
        self.message = message
        self.enabled = not opts.json
        self._status = None

    def start(self) -> "Spinner":
        if self.enabled:
            self._status = err_console.status(self.message)
            self._status.start()
        return self

    def stop(self):
        if self._status is not None:
            self._status.stop()
            self._status = None

    def succeed(self, text: str):
        self.stop()
        if self.enabled:
            err_console.print(f"[green]✔[/green] {escape(text)}")

    def fail(self, text: str):
        self.stop()
        if self.enabled:
            err_console.print(f"[red]✖[/red] {escape(text)}")
