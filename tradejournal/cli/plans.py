"""Trade plan and campaign commands for Trade Journal CLI."""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, fail, format_date, get_data_store, get_owner_id

STATUS_COLORS = {
    "idea": "dim",
    "watching": "yellow",
    "planning": "yellow",
    "active": "green",
    "closed": "blue",
}


def _get_planning_service():
    from tradejournal.services.planning import PlanningService

    return PlanningService(get_data_store())


def _status(value: str) -> str:
    color = STATUS_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"


@click.group()
def plan() -> None:
    """Manage trade plans.

    \b
    Examples:
      tradejournal plan add "Breakout" NVDA --campaign 1
      tradejournal plan list --open
      tradejournal plan status 3 active
    """
    pass


@plan.command("list")
@click.option(
    "--status",
    type=click.Choice(["idea", "watching", "active", "closed"]),
    default=None,
    help="Only show plans in this status.",
)
@click.option("--campaign", "campaign_id", type=int, default=None, help="Only show plans of this campaign.")
@click.option("--open", "open_only", is_flag=True, help="Only show plans that are not closed.")
def list_plans(status: Optional[str], campaign_id: Optional[int], open_only: bool) -> None:
    """List trade plans."""
    service = _get_planning_service()
    owner_id = get_owner_id()
    if open_only:
        plans = service.list_open_trade_plans(owner_id)
    else:
        plans = service.list_trade_plans(owner_id, status=status, campaign_id=campaign_id)

    if not plans:
        console.print(Panel(
            "[dim]No trade plans[/dim]",
            title="[bold]Trade Plans[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Trade Plans", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Symbol")
    table.add_column("Dir")
    table.add_column("Status")
    table.add_column("Campaign", justify="right")
    table.add_column("Created")

    for item in plans:
        table.add_row(
            str(item.id),
            item.name,
            item.instrument_symbol,
            item.direction,
            _status(item.status),
            str(item.campaign_id) if item.campaign_id is not None else "-",
            format_date(item.created_at),
        )

    console.print(table)


@plan.command("add")
@click.argument("name")
@click.argument("symbol")
@click.option("--campaign", "campaign_id", type=int, default=None, help="Campaign to link.")
@click.option("--direction", type=click.Choice(["long", "short"]), default="long", show_default=True)
@click.option("--entry", "entry_conditions", default="", help="Entry conditions.")
@click.option("--exit", "exit_conditions", default="", help="Exit conditions.")
@click.option("--target", "target_conditions", default="", help="Target conditions.")
@click.option("--rationale", default=None)
def add_plan(
    name: str,
    symbol: str,
    campaign_id: Optional[int],
    direction: str,
    entry_conditions: str,
    exit_conditions: str,
    target_conditions: str,
    rationale: Optional[str],
) -> None:
    """Create a trade plan."""
    from tradejournal.errors import TradeJournalError

    try:
        created = _get_planning_service().create_trade_plan(
            get_owner_id(),
            name,
            symbol,
            campaign_id=campaign_id,
            direction=direction,
            entry_conditions=entry_conditions,
            exit_conditions=exit_conditions,
            target_conditions=target_conditions,
            rationale=rationale,
        )
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Created trade plan {created.id}: {created.name} ({created.instrument_symbol})")


@plan.command("status")
@click.argument("plan_id", type=int)
@click.argument("status", type=click.Choice(["idea", "watching", "active", "closed"]))
def plan_status(plan_id: int, status: str) -> None:
    """Change the status of a trade plan."""
    from tradejournal.errors import TradeJournalError

    try:
        updated = _get_planning_service().update_trade_plan_status(get_owner_id(), plan_id, status)
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Trade plan {updated.id} is now {_status(updated.status)}")


@click.group()
def campaign() -> None:
    """Manage campaigns.

    \b
    Examples:
      tradejournal campaign add "AI infra" --thesis "Capex cycle"
      tradejournal campaign status 1 active
      tradejournal campaign note 1 "Trimmed into strength"
      tradejournal campaign status 1 closed --outcome profit_target
    """
    pass


@campaign.command("list")
@click.option(
    "--status",
    type=click.Choice(["planning", "active", "closed"]),
    default=None,
    help="Only show campaigns in this status.",
)
def list_campaigns(status: Optional[str]) -> None:
    """List campaigns."""
    campaigns = _get_planning_service().list_campaigns(get_owner_id(), status=status)

    if not campaigns:
        console.print(Panel(
            "[dim]No campaigns[/dim]",
            title="[bold]Campaigns[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Campaigns", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Status")
    table.add_column("Outcome")
    table.add_column("Created")
    table.add_column("Closed")

    for item in campaigns:
        table.add_row(
            str(item.id),
            item.name,
            _status(item.status),
            item.outcome or "-",
            format_date(item.created_at),
            format_date(item.closed_at),
        )

    console.print(table)


@campaign.command("add")
@click.argument("name")
@click.option("--thesis", default="", help="Why this campaign exists.")
def add_campaign(name: str, thesis: str) -> None:
    """Create a campaign."""
    created = _get_planning_service().create_campaign(get_owner_id(), name, thesis=thesis)
    console.print(f"[green]✓[/green] Created campaign {created.id}: {created.name}")


@campaign.command("status")
@click.argument("campaign_id", type=int)
@click.argument("status", type=click.Choice(["planning", "active", "closed"]))
@click.option(
    "--outcome",
    type=click.Choice(["manual", "profit_target", "stop_loss"]),
    default=None,
    help="Required when closing.",
)
def campaign_status(campaign_id: int, status: str, outcome: Optional[str]) -> None:
    """Change the status of a campaign."""
    from tradejournal.errors import TradeJournalError

    try:
        updated = _get_planning_service().update_campaign_status(
            get_owner_id(), campaign_id, status, outcome=outcome
        )
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Campaign {updated.id} is now {_status(updated.status)}")


@campaign.command("note")
@click.argument("campaign_id", type=int)
@click.argument("content")
def add_note(campaign_id: int, content: str) -> None:
    """Add a note to a campaign."""
    from tradejournal.errors import TradeJournalError

    try:
        _get_planning_service().add_campaign_note(get_owner_id(), campaign_id, content)
    except TradeJournalError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] Added note to campaign {campaign_id}")


@campaign.command("notes")
@click.argument("campaign_id", type=int)
def list_notes(campaign_id: int) -> None:
    """Show a campaign's notes, oldest first."""
    from tradejournal.errors import TradeJournalError

    try:
        notes = _get_planning_service().list_campaign_notes(get_owner_id(), campaign_id)
    except TradeJournalError as e:
        fail(str(e))

    if not notes:
        console.print(Panel(
            "[dim]No notes yet[/dim]",
            title=f"[bold]Campaign {campaign_id} Notes[/bold]",
            border_style="dim",
        ))
        return

    for note in notes:
        console.print(f"[dim]{format_date(note.created_at)}[/dim]  {note.content}")
