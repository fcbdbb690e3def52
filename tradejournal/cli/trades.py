"""Trade ledger commands for Trade Journal CLI.

Handles manual trade entry, listing with realized P&L, and removal.
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


def _get_trade_service():
    from tradejournal.services.trades import TradeService

    return TradeService(get_data_store())


@click.group()
def trades() -> None:
    """Manage the trade ledger.

    \b
    Examples:
      tradejournal trades list
      tradejournal trades add AAPL --side buy --qty 10 --price 180
      tradejournal trades add AAPL --side sell --qty 10 --price 190 --date 2024-03-01
      tradejournal trades rm 4
    """
    pass


@trades.command("list")
@click.option("--ticker", default=None, help="Only show this ticker.")
@click.option("--campaign", "campaign_id", type=int, default=None, help="Only show trades of this campaign.")
@click.option("-n", "--limit", type=int, default=None, help="Show at most N trades.")
def list_trades(ticker: Optional[str], campaign_id: Optional[int], limit: Optional[int]) -> None:
    """List trades, newest first, with realized P&L."""
    from tradejournal.errors import TradeJournalError

    service = _get_trade_service()
    owner_id = get_owner_id()
    rows = service.list_trades_with_pl(owner_id)
    if campaign_id is not None:
        try:
            campaign_trade_ids = {t.id for t in service.list_campaign_trades(owner_id, campaign_id)}
        except TradeJournalError as e:
            fail(str(e))
        rows = [(trade, pl) for trade, pl in rows if trade.id in campaign_trade_ids]
    if ticker:
        rows = [(trade, pl) for trade, pl in rows if trade.ticker == ticker.strip().upper()]
    if limit:
        rows = rows[:limit]

    if not rows:
        console.print(Panel(
            "[dim]No trades recorded[/dim]",
            title="[bold]Trades[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Ticker", style="bold")
    table.add_column("Side")
    table.add_column("Dir")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("Source")
    table.add_column("P&L", justify="right")

    for trade, pl in rows:
        side_color = "green" if trade.side == "buy" else "red"
        table.add_row(
            str(trade.id),
            format_date(trade.date),
            trade.ticker,
            f"[{side_color}]{trade.side.upper()}[/{side_color}]",
            trade.direction,
            format_number(trade.quantity),
            format_number(trade.price),
            format_number(trade.fees),
            trade.source,
            format_pl(pl),
        )

    console.print(table)


@trades.command("add")
@click.argument("ticker")
@click.option("--side", type=click.Choice(["buy", "sell"]), required=True)
@click.option("--direction", type=click.Choice(["long", "short"]), default="long", show_default=True)
@click.option("--asset-type", type=click.Choice(["stock", "crypto"]), default="stock", show_default=True)
@click.option("--qty", "quantity", type=float, required=True, help="Quantity traded.")
@click.option("--price", type=float, required=True, help="Execution price.")
@click.option("--date", "date_text", default=None, help="YYYY-MM-DD [HH:MM], local time. Defaults to now.")
@click.option("--fees", type=float, default=None)
@click.option("--taxes", type=float, default=None)
@click.option("--notes", default=None)
@click.option("--plan", "trade_plan_id", type=int, default=None, help="Link a trade plan.")
@click.option("--campaign", "campaign_id", type=int, default=None, help="Link a campaign directly.")
def add_trade(
    ticker: str,
    side: str,
    direction: str,
    asset_type: str,
    quantity: float,
    price: float,
    date_text: Optional[str],
    fees: Optional[float],
    taxes: Optional[float],
    notes: Optional[str],
    trade_plan_id: Optional[int],
    campaign_id: Optional[int],
) -> None:
    """Record a trade manually."""
    from pydantic import ValidationError

    from tradejournal.errors import TradeJournalError
    from tradejournal.models import Trade
    from tradejournal.services.planning import now_millis

    try:
        date = parse_date(date_text) if date_text else now_millis()
        trade = Trade(
            owner_id=get_owner_id(),
            ticker=ticker,
            asset_type=asset_type,
            side=side,
            direction=direction,
            price=price,
            quantity=quantity,
            date=date,
            fees=fees,
            taxes=taxes,
            notes=notes,
            trade_plan_id=trade_plan_id,
            campaign_id=campaign_id,
        )
        saved = _get_trade_service().create_trade(trade)
    except ValidationError as e:
        fail(f"Invalid trade: {e.errors()[0]['loc'][0]}: {e.errors()[0]['msg']}")
    except (TradeJournalError, ValueError) as e:
        fail(str(e))

    console.print(
        f"[green]✓[/green] Recorded trade {saved.id}: "
        f"{saved.side.upper()} {format_number(saved.quantity)} {saved.ticker} @ {format_number(saved.price)}"
    )


@trades.command("rm")
@click.argument("trade_id", type=int)
def remove_trade(trade_id: int) -> None:
    """Delete a trade."""
    from tradejournal.errors import TradeJournalError

    try:
        _get_trade_service().delete_trade(get_owner_id(), trade_id)
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Deleted trade {trade_id}")
