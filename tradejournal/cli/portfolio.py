"""Portfolio commands for Trade Journal CLI.

Handles open positions, realized P&L, dashboard statistics and portfolio
value snapshots.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import (
    console,
    fail,
    format_date,
    format_number,
    format_pl,
    get_data_store,
    get_owner_id,
    parse_date,
)


@click.command()
def positions() -> None:
    """Show open positions with their average cost.

    \b
    Examples:
      tradejournal positions
    """
    from tradejournal.services.trades import TradeService

    open_positions = TradeService(get_data_store()).get_positions(get_owner_id())

    if not open_positions:
        console.print(Panel(
            "[dim]No open positions[/dim]",
            title="[bold]Positions[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Open Positions", show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Direction")
    table.add_column("Quantity", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Cost Basis", justify="right")

    for position in open_positions:
        dir_color = "green" if position.direction == "long" else "red"
        table.add_row(
            position.ticker,
            f"[{dir_color}]{position.direction.upper()}[/{dir_color}]",
            format_number(position.quantity),
            format_number(position.average_cost),
            f"{position.quantity * position.average_cost:,.2f}",
        )

    console.print(table)


@click.command()
def pnl() -> None:
    """Show realized P&L per ticker.

    \b
    Examples:
      tradejournal pnl
    """
    from tradejournal.accounting.pnl import calculate_trades_pl, total_realized_pl

    store = get_data_store()
    trades = store.list_trades(get_owner_id())
    pl_by_trade = calculate_trades_pl(trades)

    by_ticker: dict[str, float] = {}
    closes: dict[str, int] = {}
    for trade in trades:
        pl = pl_by_trade.get(trade.id)
        if pl is None:
            continue
        by_ticker[trade.ticker] = by_ticker.get(trade.ticker, 0.0) + pl
        closes[trade.ticker] = closes.get(trade.ticker, 0) + 1

    if not by_ticker:
        console.print(Panel(
            "[dim]No closed trades yet[/dim]",
            title="[bold]Realized P&L[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Realized P&L", show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Closing Trades", justify="right")
    table.add_column("Realized P&L", justify="right")

    for ticker in sorted(by_ticker):
        table.add_row(ticker, str(closes[ticker]), format_pl(by_ticker[ticker]))

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {format_pl(total_realized_pl(pl_by_trade))}")


@click.command()
def stats() -> None:
    """Show dashboard statistics.

    \b
    Examples:
      tradejournal stats
    """
    from tradejournal.accounting.analytics import get_dashboard_stats

    store = get_data_store()
    owner_id = get_owner_id()
    result = get_dashboard_stats(
        store.list_trades(owner_id),
        store.list_trade_plans(owner_id),
        store.list_campaigns(owner_id),
    )

    def _optional_pct(value):
        return "-" if value is None else f"{value:.1f}%"

    content = (
        f"Realized P&L: {format_pl(result.total_realized_pl)}\n"
        f"Realized P&L (YTD): {format_pl(result.total_realized_pl_ytd)}\n"
        f"Trades: {result.total_trade_count}\n"
        f"Open positions: {result.open_position_count}\n\n"
        f"Open campaigns: {result.open_campaign_count}\n"
        f"Closed campaigns: {result.closed_campaign_count}\n"
        f"Winning campaigns: {result.winning_campaign_count}\n"
        f"Win rate: {_optional_pct(result.win_rate)}\n"
        f"Avg win: {format_pl(result.avg_win)}\n"
        f"Avg loss: {format_pl(result.avg_loss)}\n"
        f"Profit factor: {'-' if result.profit_factor is None else f'{result.profit_factor:.2f}'}"
    )
    console.print(Panel(content, title="[bold]Dashboard[/bold]", border_style="cyan"))


def _get_snapshot_service():
    from tradejournal.services.snapshots import SnapshotService

    return SnapshotService(get_data_store())


@click.group()
def snapshot() -> None:
    """Record and review total portfolio value over time.

    \b
    Examples:
      tradejournal snapshot add 125000 --cash 20000
      tradejournal snapshot add 118000 --date 2024-01-31
      tradejournal snapshot list
      tradejournal snapshot latest
    """
    pass


@snapshot.command("add")
@click.argument("total_value", type=float)
@click.option("--cash", "cash_balance", type=float, default=None, help="Cash part of the total.")
@click.option("--date", "date_text", default=None, help="YYYY-MM-DD [HH:MM], local time. Defaults to now.")
def add_snapshot(total_value: float, cash_balance: Optional[float], date_text: Optional[str]) -> None:
    """Record the portfolio's total value."""
    from tradejournal.errors import TradeJournalError
    from tradejournal.services.planning import now_millis

    try:
        date = parse_date(date_text) if date_text else now_millis()
        created = _get_snapshot_service().create_snapshot(
            get_owner_id(), date, total_value, cash_balance=cash_balance
        )
    except (TradeJournalError, ValueError) as e:
        fail(str(e))

    console.print(
        f"[green]✓[/green] Recorded snapshot {created.id}: "
        f"{created.total_value:,.2f} on {format_date(created.date)}"
    )


@snapshot.command("list")
@click.option("-n", "--limit", type=int, default=None, help="Show at most N snapshots.")
def list_snapshots(limit: Optional[int]) -> None:
    """List snapshots, newest first."""
    snapshots = _get_snapshot_service().list_snapshots(get_owner_id())
    if limit:
        snapshots = snapshots[:limit]

    if not snapshots:
        console.print(Panel(
            "[dim]No snapshots recorded[/dim]",
            title="[bold]Portfolio Snapshots[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Portfolio Snapshots", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Total Value", justify="right")
    table.add_column("Cash", justify="right")
    table.add_column("Source")

    for item in snapshots:
        table.add_row(
            str(item.id),
            format_date(item.date),
            f"{item.total_value:,.2f}",
            "-" if item.cash_balance is None else f"{item.cash_balance:,.2f}",
            item.source,
        )

    console.print(table)


@snapshot.command("latest")
def latest_snapshot() -> None:
    """Show the most recent snapshot."""
    latest = _get_snapshot_service().get_latest_snapshot(get_owner_id())
    if latest is None:
        fail("No snapshots recorded")

    cash = "-" if latest.cash_balance is None else f"{latest.cash_balance:,.2f}"
    console.print(Panel(
        f"Date: {format_date(latest.date)}\n"
        f"Total value: [bold]{latest.total_value:,.2f}[/bold]\n"
        f"Cash: {cash}",
        title="[bold]Latest Snapshot[/bold]",
        border_style="cyan",
    ))
