"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from fullsetarb.config import configure_logging, get_settings

app = typer.Typer(
    name="fullset",
    help="fullset-arb - Polymarket fullset (Yes+No) arbitrage scanner.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir=config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from fullsetarb.cli import opportunities, scan  # noqa: E402

app.command("run")(scan.run)
app.command("scan")(scan.scan_once)
app.command("quote")(scan.quote)
app.add_typer(opportunities.app, name="opportunities")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
