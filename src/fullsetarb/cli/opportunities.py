"""Opportunities subcommand: list, count."""

from __future__ import annotations

import typer

from fullsetarb.models import Direction
from fullsetarb.storage import get_connection, init_schema
from fullsetarb.storage.opportunities import OpportunityRepository

app = typer.Typer(help="Review recorded opportunities")


@app.command("list")
def list_opportunities(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", "-n", help="Max rows"),
    direction: Direction | None = typer.Option(None, "--type", "-t", help="buy or sell"),
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market ID"),
) -> None:
    """List recorded opportunities, newest first."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        repo = OpportunityRepository(conn)
        rows = repo.list_recent(limit=limit, direction=direction, market_id=market)
        for opp in rows:
            ts = opp.created_at.isoformat(sep=" ", timespec="seconds") if opp.created_at else "-"
            typer.echo(
                f"  {ts}  {opp.direction.value:<4}  buy {opp.buy_price}  sell {opp.sell_price}  "
                f"{opp.link}"
            )
        typer.echo(f"Total: {len(rows)} opportunities")
    finally:
        conn.close()


@app.command("count")
def count(ctx: typer.Context) -> None:
    """Show how many opportunities are stored."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        typer.echo(str(OpportunityRepository(conn).count()))
    finally:
        conn.close()
