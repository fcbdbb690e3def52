"""Brokerage account commands for Trade Journal CLI."""

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, fail, get_data_store, get_owner_id


def _get_account_service():
    from tradejournal.services.accounts import AccountService

    return AccountService(get_data_store())


@click.group()
def accounts() -> None:
    """Name your brokerage accounts.

    \b
    Examples:
      tradejournal accounts list
      tradejournal accounts set ibkr U1234567 "Main margin"
    """
    pass


@accounts.command("list")
def list_accounts() -> None:
    """List accounts seen in trades and the inbox."""
    service = _get_account_service()
    owner_id = get_owner_id()
    known = service.list_known_brokerage_accounts(owner_id)
    names = {(m.source, m.account_id): m.friendly_name for m in service.list_account_mappings(owner_id)}

    if not known and not names:
        console.print(Panel(
            "[dim]No brokerage accounts yet[/dim]",
            title="[bold]Accounts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Brokerage Accounts", show_header=True, header_style="bold cyan")
    table.add_column("Source")
    table.add_column("Account ID")
    table.add_column("Name", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Inbox", justify="right")

    seen = set()
    for account in known:
        key = (account.source, account.account_id)
        seen.add(key)
        table.add_row(
            account.source,
            account.account_id,
            names.get(key, "[dim]-[/dim]"),
            str(account.trade_count),
            str(account.inbox_trade_count),
        )
    for (source, account_id), name in sorted(names.items()):
        if (source, account_id) not in seen:
            table.add_row(source, account_id, name, "0", "0")

    console.print(table)


@accounts.command("set")
@click.argument("source", type=click.Choice(["ibkr", "kraken"]))
@click.argument("account_id")
@click.argument("friendly_name")
def set_account(source: str, account_id: str, friendly_name: str) -> None:
    """Set the display name of a brokerage account."""
    from tradejournal.errors import TradeJournalError

    try:
        mapping = _get_account_service().upsert_account_mapping(
            get_owner_id(), source, account_id, friendly_name
        )
    except TradeJournalError as e:
        fail(str(e))

    console.print(
        f"[green]✓[/green] {mapping.source} {mapping.account_id} → [bold]{mapping.friendly_name}[/bold]"
    )
