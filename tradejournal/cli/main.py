"""Main CLI entry point for Trade Journal.

This module provides the main click group and lazy loading
for heavy imports to improve startup time.
"""

import logging

import click
from rich.console import Console


class LazyGroup(click.Group):
    """A click Group whose subcommands are imported on first use.

    Each lazy subcommand maps to ``"module.path:attribute"``.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self._lazy_subcommands and cmd_name not in self.commands:
            self.add_command(self._lazy_load(cmd_name), cmd_name)
        return super().get_command(ctx, cmd_name)

    def _lazy_load(self, cmd_name: str) -> click.Command:
        import importlib

        module_path, attr_name = self._lazy_subcommands[cmd_name].split(":")
        cmd = getattr(importlib.import_module(module_path), attr_name)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(f"{module_path}:{attr_name} is not a command")
        return cmd


LAZY_SUBCOMMANDS = {
    "init": "tradejournal.cli.settings:init",
    "import": "tradejournal.cli.imports:import_file",
    "inbox": "tradejournal.cli.imports:inbox",
    "trades": "tradejournal.cli.trades:trades",
    "positions": "tradejournal.cli.portfolio:positions",
    "pnl": "tradejournal.cli.portfolio:pnl",
    "stats": "tradejournal.cli.portfolio:stats",
    "snapshot": "tradejournal.cli.portfolio:snapshot",
    "accounts": "tradejournal.cli.accounts:accounts",
    "plan": "tradejournal.cli.plans:plan",
    "campaign": "tradejournal.cli.plans:campaign",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    from rich.logging import RichHandler

    from tradejournal.config import get_log_level, load_config

    level = "DEBUG" if verbose else get_log_level(load_config())
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Trade Journal - record trades, track positions and review imports.

    Import brokerage exports into a review inbox, accept them into your
    trade ledger, and see positions and realized P&L computed with a
    weighted-average cost basis.

    \b
    Quick Start:
      tradejournal init --owner me              # Create config
      tradejournal import trades.csv -s ibkr    # Import an IBKR export
      tradejournal inbox list                   # Review imported trades
      tradejournal inbox accept-all             # Accept valid trades
      tradejournal positions                    # View open positions
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
