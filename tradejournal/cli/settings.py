"""Configuration command for Trade Journal CLI."""

from typing import Optional

import click
from rich.panel import Panel

from tradejournal.cli.common import console


@click.command()
@click.option("--owner", "owner_id", required=True, help="Owner identifier to scope your records.")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Database file path. Defaults to the config directory.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Default log level.",
)
def init(owner_id: str, db_path: Optional[str], log_level: Optional[str]) -> None:
    """Create or update the configuration file.

    \b
    Examples:
      tradejournal init --owner me
      tradejournal init --owner me --db ~/journal.db
    """
    from tradejournal.config import load_config, save_config

    config = load_config()
    config.setdefault("user", {})["owner_id"] = owner_id.strip()
    if db_path:
        config.setdefault("database", {})["path"] = db_path
    if log_level:
        config.setdefault("logging", {})["level"] = log_level.upper()

    path = save_config(config)
    console.print(Panel(
        f"Owner: [cyan]{owner_id.strip()}[/cyan]\nConfig: [dim]{path}[/dim]",
        title="[bold green]Configuration saved[/bold green]",
        border_style="green",
    ))
