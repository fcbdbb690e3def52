"""Shared helpers for Trade Journal CLI commands."""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel

console = Console()


def get_config() -> dict:
    """Lazily load configuration."""
    from tradejournal.config import load_config

    return load_config()


def get_owner_id() -> str:
    """Owner identifier every command is scoped to."""
    from tradejournal.config import get_owner_id as _owner_id

    return _owner_id(get_config())


def get_data_store():
    """Get the data store instance."""
    from tradejournal.config import get_db_path
    from tradejournal.db.store import DataStore

    return DataStore(get_db_path(get_config()))


def print_error(message: str) -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))


def fail(message: str) -> None:
    """Print an error panel and exit with status 1."""
    print_error(message)
    raise SystemExit(1)


def format_date(millis: Optional[int]) -> str:
    if millis is None:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


def parse_date(value: str) -> int:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM`` (local time) to epoch ms.

    Raises:
        ValueError: If the value matches neither format.
    """
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d"):
        try:
            return int(datetime.strptime(value.strip(), fmt).timestamp() * 1000)
        except ValueError:
            continue
    raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD [HH:MM]")


def format_number(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:,.4f}".rstrip("0").rstrip(".")


def format_pl(value: Optional[float]) -> str:
    """Colorize a P&L amount for rich output."""
    if value is None:
        return "[dim]-[/dim]"
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}{value:,.2f}[/{color}]"
