"""CLI for Recession Monitor."""
from __future__ import annotations

import asyncio

import typer

from recession_monitor.config import configure_logging, get_settings
from recession_monitor.jobs.refresh import refresh_live_data
from recession_monitor.roster.baseline import generate_baseline
from recession_monitor.roster.store import RosterStore
from recession_monitor.score.risk import rank_countries
from recession_monitor.score.rules import SCORING_RULES

app_cli = typer.Typer(name="recession-monitor", help="Recession Monitor CLI")


@app_cli.command()
def rankings(
    live: bool = typer.Option(False, help="Merge live World Bank data before ranking."),
    limit: int = typer.Option(50, min=1, help="Number of countries to show."),
):
    """Print countries ranked by recession-risk score."""
    configure_logging()
    store = RosterStore(generate_baseline())
    if live:
        asyncio.run(refresh_live_data(store, log_fn=typer.echo))

    snapshot = store.snapshot
    typer.echo(f"Data: {'live World Bank' if snapshot.is_live else 'simulated'} (roster v{snapshot.version})")
    for item in rank_countries(snapshot.countries)[:limit]:
        typer.echo(f"{item['rank']:>3}  {item['iso3']}  {item['name']:<24} {item['score']:>5.1f}  {item['tier']}")


@app_cli.command()
def methodology():
    """Print the indicator catalog with weights and option severities."""
    for rule in SCORING_RULES:
        typer.echo(f"{rule.label} ({rule.id}) weight={rule.weight:g}")
        for option in rule.options:
            typer.echo(f"    {option.value:<12} {option.severity:<4g} {option.label}")


@app_cli.command()
def serve(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("recession_monitor.main:app", host=host, port=port, reload=reload, log_level=get_settings().log_level.lower())


if __name__ == "__main__":
    app_cli()
