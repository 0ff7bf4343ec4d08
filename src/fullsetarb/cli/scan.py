"""Scan commands: run (scheduled), scan (one cycle), quote (one token pair)."""

from __future__ import annotations

import asyncio
import signal
import sys

import structlog
import typer

from fullsetarb.config import Settings
from fullsetarb.errors import CatalogError, StorageError
from fullsetarb.ingestion.polymarket.clob import ClobBookClient
from fullsetarb.scanner.detector import OpportunityDetector
from fullsetarb.scanner.manager import ScanManager
from fullsetarb.scheduler import ScanScheduler, validate_schedule
from fullsetarb.storage import OpportunityRepository, open_repository

log = structlog.get_logger(__name__)


def _open_repository_or_exit(settings: Settings) -> OpportunityRepository:
    try:
        repo = open_repository(settings.db_path)
    except StorageError as e:
        log.error("startup_failed", error=str(e))
        typer.echo(f"Failed to start: {e}", err=True)
        raise typer.Exit(1) from e
    log.info("database_connected", db_path=settings.db_path)
    return repo


async def serve(settings: Settings, repo: OpportunityRepository, schedule: str) -> None:
    """Run the scheduler until SIGINT/SIGTERM, then shut down cleanly."""
    manager = ScanManager(settings, repo)
    scheduler = ScanScheduler(manager.run_cycle, schedule=schedule)
    stop_event = asyncio.Event()

    def shutdown() -> None:
        stop_event.set()

    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGINT, shutdown)
        loop.add_signal_handler(signal.SIGTERM, shutdown)
    try:
        await scheduler.start()
        await stop_event.wait()
        log.info("shutdown_signal_received")
    finally:
        await scheduler.stop(grace_sec=settings.shutdown_grace_sec)
        await manager.aclose()


def run(
    ctx: typer.Context,
    cron: str | None = typer.Option(None, "--cron", help="Cron schedule (overrides config)"),
) -> None:
    """Scan now, then on every cron fire until interrupted."""
    settings: Settings = ctx.obj["settings"]
    schedule = cron or settings.cron
    try:
        validate_schedule(schedule)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--cron") from e
    repo = _open_repository_or_exit(settings)
    typer.echo(f"Scanning on schedule '{schedule}' (Ctrl+C to stop)...")
    try:
        asyncio.run(serve(settings, repo, schedule))
    except KeyboardInterrupt:
        pass
    finally:
        repo.close()
        log.info("database_closed")
    typer.echo("Stopped.")


def scan_once(ctx: typer.Context) -> None:
    """Run a single scan cycle and report what was found."""
    settings: Settings = ctx.obj["settings"]
    repo = _open_repository_or_exit(settings)

    async def _once():
        manager = ScanManager(settings, repo)
        try:
            return await manager.run_cycle()
        finally:
            await manager.aclose()

    try:
        result = asyncio.run(_once())
    except CatalogError as e:
        typer.echo(f"Catalog fetch failed: {e}", err=True)
        raise typer.Exit(1) from e
    finally:
        repo.close()
    for opp in result.opportunities:
        typer.echo(f"  [{opp.direction.value}] {opp.price}  {opp.link}  {opp.question[:60]}")
    typer.echo(
        f"Candidates: {result.candidates}  found: {result.found}  saved: {result.saved}  "
        f"({result.duration_sec:.2f}s)"
    )


def quote(
    ctx: typer.Context,
    yes_token: str = typer.Argument(..., help="Yes outcome token id"),
    no_token: str = typer.Argument(..., help="No outcome token id"),
) -> None:
    """Show best bid/ask for both tokens and the fullset buy/sell prices."""
    settings: Settings = ctx.obj["settings"]

    async def _quote():
        books = ClobBookClient(base_url=settings.clob_api_base, timeout=settings.http_timeout_sec)
        try:
            detector = OpportunityDetector(
                books, payout=settings.payout, price_scale=settings.price_scale
            )
            return await detector.quote(yes_token, no_token)
        finally:
            await books.aclose()

    q = asyncio.run(_quote())
    if q is None:
        typer.echo("Order book unavailable for one or both tokens.")
        raise typer.Exit(1)
    typer.echo(f"Yes  bid {q.yes_bid}  ask {q.yes_ask}")
    typer.echo(f"No   bid {q.no_bid}  ask {q.no_ask}")
    typer.echo(f"Fullset buy {q.buy_price}  sell {q.sell_price}  (payout {settings.payout:g})")
