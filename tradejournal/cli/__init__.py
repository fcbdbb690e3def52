"""CLI commands for Trade Journal.

This package provides the command-line interface for importing brokerage
exports, reviewing the inbox, and reporting positions and P&L.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
