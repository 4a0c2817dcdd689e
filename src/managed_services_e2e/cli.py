"""Typer CLI for the managed services end-to-end harness."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from managed_services_e2e.config.loader import load_e2e_config
from managed_services_e2e.config.models import E2EConfig
from managed_services_e2e.scenario.catalog import SCENARIOS, clean_all, run_scenario
from managed_services_e2e.scenario.runner import ScenarioReport, StepStatus

console = Console()
app = typer.Typer(name="mse2e", help="Managed services end-to-end harness")

_STATUS_STYLE = {
    StepStatus.PASSED: "green",
    StepStatus.FAILED: "red",
    StepStatus.SKIPPED: "yellow",
}


def _load(config_path: str | None) -> E2EConfig:
    if config_path is not None and not Path(config_path).exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    return load_e2e_config(Path(config_path) if config_path else None)


def _report_table(report: ScenarioReport) -> Table:
    table = Table(title=f"Scenario: {report.scenario}")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Elapsed", justify="right")
    table.add_column("Reason")
    for r in report.results:
        style = _STATUS_STYLE[r.status]
        table.add_row(
            r.name, f"[{style}]{r.status}[/{style}]", f"{r.elapsed:.1f}s", r.reason
        )
    return table


@app.command()
def validate(
    config_path: str | None = typer.Option(None, "--config", help="Harness YAML"),
) -> None:
    """Validate the harness configuration and print the effective values."""
    try:
        config = _load(config_path)
    except typer.Exit:
        raise
    except Exception as exc:
        console.print(f"[red]Validation error:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print(f"[green]Valid[/green]: postfix={config.name_postfix}")
    console.print(f"  service api:  {config.api.service_api_url}")
    console.print(f"  registry api: {config.api.registry_api_url}")
    token = "set" if config.api.token and config.api.token.get_secret_value() else "(none)"
    console.print(f"  token:        {token}")
    console.print(f"  kafka:        {config.kafka_instance_name}")
    console.print(f"  account:      {config.service_account_name}")
    console.print(f"  registry:     {config.registry_name}")
    console.print(f"  config file:  {config_path or '(defaults)'}")


@app.command()
def run(
    scenario: str = typer.Argument(..., help=f"One of: {', '.join(SCENARIOS)}"),
    config_path: str | None = typer.Option(None, "--config", help="Harness YAML"),
) -> None:
    """Run a scenario and print the outcome of each step."""
    if scenario not in SCENARIOS:
        console.print(
            f"[red]Unknown scenario:[/red] {scenario} (expected one of {', '.join(SCENARIOS)})"
        )
        raise typer.Exit(2)
    config = _load(config_path)

    report = asyncio.run(run_scenario(scenario, config))
    console.print(_report_table(report))
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def clean(
    config_path: str | None = typer.Option(None, "--config", help="Harness YAML"),
) -> None:
    """Delete every resource named by the config, if it exists."""
    config = _load(config_path)
    deleted = asyncio.run(clean_all(config))

    table = Table(title="Cleanup")
    table.add_column("Kind", style="cyan")
    table.add_column("Deleted")
    for kind, ids in deleted.items():
        table.add_row(kind.value, ", ".join(ids) if ids else "[dim](none)[/dim]")
    console.print(table)
