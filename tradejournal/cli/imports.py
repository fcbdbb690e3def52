"""Import and inbox commands for Trade Journal CLI.

Handles brokerage CSV import and review of the import inbox: listing,
editing, accepting and deleting pending trades.
"""

from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import (
    console,
    fail,
    format_date,
    format_number,
    get_data_store,
    get_owner_id,
    parse_date,
)


def _get_inbox_service():
    from tradejournal.imports.inbox import InboxService

    return InboxService(get_data_store())


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-s", "--source",
    type=click.Choice(["ibkr", "kraken"]),
    required=True,
    help="Brokerage the export came from.",
)
def import_file(csv_file: Path, source: str) -> None:
    """Import a brokerage CSV export into the review inbox.

    Duplicates of trades already in your ledger or inbox are skipped.
    Rows with problems are still imported so you can fix them.

    \b
    Examples:
      tradejournal import flex.csv --source ibkr
      tradejournal import trades.csv -s kraken
    """
    from tradejournal.errors import TradeJournalError
    from tradejournal.imports.ingestion import parse_export

    content = csv_file.read_text(encoding="utf-8-sig")
    result = parse_export(source, content)

    if result.errors:
        for error in result.errors:
            console.print(f"[red]✗[/red] {error}")
        if not result.trades:
            raise SystemExit(1)

    try:
        summary = _get_inbox_service().import_candidates(get_owner_id(), result.trades)
    except TradeJournalError as e:
        fail(str(e))

    console.print(Panel(
        f"Imported: [bold green]{summary.imported}[/bold green]\n"
        f"Duplicates skipped: [yellow]{summary.skipped_duplicates}[/yellow]\n"
        f"With errors: [red]{summary.with_validation_errors}[/red]\n"
        f"With warnings: [dim]{summary.with_warnings}[/dim]",
        title=f"[bold]{source.upper()} Import[/bold]",
        border_style="cyan",
    ))
    if summary.imported:
        console.print("\n[dim]Review with:[/dim] [cyan]tradejournal inbox list[/cyan]")


@click.group()
def inbox() -> None:
    """Review imported trades before they enter your ledger.

    \b
    Examples:
      tradejournal inbox list
      tradejournal inbox edit 12 --direction short
      tradejournal inbox accept 12 --notes "Earnings play"
      tradejournal inbox accept 13 --suggested
      tradejournal inbox accept-all
    """
    pass


@inbox.command("list")
def list_inbox() -> None:
    """List pending inbox trades."""
    service = _get_inbox_service()
    owner_id = get_owner_id()
    rows = service.list_inbox(owner_id)

    if not rows:
        console.print(Panel(
            "[dim]Inbox is empty[/dim]",
            title="[bold]Import Inbox[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Import Inbox", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Source")
    table.add_column("Date")
    table.add_column("Ticker", style="bold")
    table.add_column("Side")
    table.add_column("Dir")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Plan", justify="right")
    table.add_column("Issues", max_width=40)

    suggestions = service.suggest_trade_plans(owner_id)
    for row in rows:
        if row.trade_plan_id is not None:
            plan_cell = str(row.trade_plan_id)
        elif row.id in suggestions:
            plan_cell = f"[dim]{suggestions[row.id].suggested_trade_plan_id}?[/dim]"
        else:
            plan_cell = "-"
        issues = [f"[red]{e}[/red]" for e in row.validation_errors]
        issues += [f"[yellow]{w}[/yellow]" for w in row.validation_warnings]
        table.add_row(
            str(row.id),
            row.source,
            format_date(row.date),
            row.ticker or "[red]?[/red]",
            row.side or "[red]?[/red]",
            row.direction or "[red]?[/red]",
            format_number(row.quantity),
            format_number(row.price),
            plan_cell,
            "\n".join(issues) or "[green]ok[/green]",
        )

    console.print(table)


@inbox.command("edit")
@click.argument("inbox_id", type=int)
@click.option("--ticker", default=None, help="Ticker symbol.")
@click.option("--asset-type", type=click.Choice(["stock", "crypto"]), default=None)
@click.option("--side", type=click.Choice(["buy", "sell"]), default=None)
@click.option("--direction", type=click.Choice(["long", "short"]), default=None)
@click.option("--price", type=float, default=None)
@click.option("--qty", "quantity", type=float, default=None)
@click.option("--date", "date_text", default=None, help="YYYY-MM-DD [HH:MM], local time.")
@click.option("--notes", default=None)
@click.option("--plan", "trade_plan_id", type=int, default=None, help="Link a trade plan.")
def edit_inbox(inbox_id: int, date_text: Optional[str], **fields) -> None:
    """Edit a pending inbox trade and re-validate it."""
    from tradejournal.errors import TradeJournalError
    from tradejournal.models import InboxTradePatch

    updates = {key: value for key, value in fields.items() if value is not None}
    if date_text:
        try:
            updates["date"] = parse_date(date_text)
        except ValueError as e:
            fail(str(e))
    if not updates:
        fail("Nothing to update")

    try:
        row = _get_inbox_service().update_inbox_trade(
            get_owner_id(), inbox_id, InboxTradePatch(**updates)
        )
    except TradeJournalError as e:
        fail(str(e))

    if row.validation_errors:
        console.print(f"[yellow]Updated inbox trade {inbox_id}, still has errors:[/yellow]")
        for error in row.validation_errors:
            console.print(f"  [red]✗[/red] {error}")
    else:
        console.print(f"[green]✓[/green] Updated inbox trade {inbox_id}")


@inbox.command("accept")
@click.argument("inbox_id", type=int)
@click.option("--notes", default=None, help="Notes for the accepted trade.")
@click.option("--plan", "trade_plan_id", type=int, default=None, help="Link a trade plan.")
@click.option("--campaign", "campaign_id", type=int, default=None, help="Link a campaign.")
@click.option("--suggested", is_flag=True, help="Link the suggested trade plan, if any.")
def accept_inbox(
    inbox_id: int,
    notes: Optional[str],
    trade_plan_id: Optional[int],
    campaign_id: Optional[int],
    suggested: bool,
) -> None:
    """Accept a pending inbox trade into the ledger.

    Plans suggested by ``inbox list`` are shown with a trailing "?".
    """
    from tradejournal.errors import TradeJournalError

    service = _get_inbox_service()
    owner_id = get_owner_id()
    if suggested and trade_plan_id is None:
        suggestion = service.suggest_trade_plans(owner_id).get(inbox_id)
        if suggestion is not None:
            trade_plan_id = suggestion.suggested_trade_plan_id

    try:
        result = service.accept_inbox_trade(
            owner_id, inbox_id, notes=notes, trade_plan_id=trade_plan_id, campaign_id=campaign_id
        )
    except TradeJournalError as e:
        fail(str(e))

    if not result.accepted:
        fail(f"Could not accept inbox trade {inbox_id}: {result.error}")

    console.print(f"[green]✓[/green] Accepted inbox trade {inbox_id} as trade {result.trade.id}")


@inbox.command("accept-all")
def accept_all_inbox() -> None:
    """Accept every valid pending inbox trade."""
    result = _get_inbox_service().accept_all(get_owner_id())

    console.print(f"[green]✓[/green] Accepted {result.accepted} trades")
    if result.skipped_invalid:
        console.print(f"[yellow]Skipped {result.skipped_invalid} invalid trades:[/yellow]")
        for error in result.errors:
            console.print(f"  [red]✗[/red] {error}")


@inbox.command("rm")
@click.argument("inbox_id", type=int)
def remove_inbox(inbox_id: int) -> None:
    """Delete a pending inbox trade."""
    from tradejournal.errors import TradeJournalError

    try:
        _get_inbox_service().delete_inbox_trade(get_owner_id(), inbox_id)
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Deleted inbox trade {inbox_id}")


@inbox.command("clear")
@click.confirmation_option(prompt="Delete all pending inbox trades?")
def clear_inbox() -> None:
    """Delete all pending inbox trades."""
    count = _get_inbox_service().delete_all(get_owner_id())
    console.print(f"[green]✓[/green] Deleted {count} inbox trades")
