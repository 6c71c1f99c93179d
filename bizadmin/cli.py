"""Typer CLI application for the business admin suite.

Provides commands for database setup, demo data, report summaries,
exports, report scheduling, and launching the API server and dashboard.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from bizadmin.domain.errors import DomainError

console = Console()
app = typer.Typer(
    name="bizadmin",
    help="Business admin suite -- records, reports, exports & scheduled delivery.",
    add_completion=False,
    no_args_is_help=True,
)

CONFIG_OPTION = typer.Option("config/settings.yaml", "--config", "-c", help="Settings YAML file.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    level = logging.DEBUG if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_app(config_path: str = "config/settings.yaml", with_scheduler: bool = False):
    """Lazy-import, initialise and return the application."""
    from bizadmin.app import BizAdmin
    biz = BizAdmin(config_path=config_path)
    biz.initialize(with_scheduler=with_scheduler)
    return biz


def _fail(message: str) -> None:
    console.print("[red]✘[/red] " + message)
    raise typer.Exit(code=1)


def _stats_table(title: str, stats: dict, failed: bool = False) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", min_width=22)
    table.add_column("Value", justify="right")
    if failed:
        table.add_row("Status", "[yellow]⚠ data unavailable[/yellow]")
    for key, value in stats.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}: {v}" for k, v in value.items()) or "-"
        table.add_row(key.replace("_", " ").title(), str(value))
    return table


# ------------------------------------------------------------------
# init-db
# ------------------------------------------------------------------
@app.command("init-db")
def init_db_command(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create all database tables."""
    _setup_logging(verbose)
    _get_app(config)
    console.print("[green]✔[/green] Database tables created.")


# ------------------------------------------------------------------
# seed
# ------------------------------------------------------------------
@app.command()
def seed(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Load a small demo dataset."""
    _setup_logging(verbose)
    _get_app(config)
    from bizadmin.seed import seed_demo_data
    try:
        counts = seed_demo_data()
    except DomainError as exc:
        _fail("Seeding failed: " + str(exc))
    for name, count in counts.items():
        console.print("[green]✔[/green] " + name + ": " + str(count))


# ------------------------------------------------------------------
# summary
# ------------------------------------------------------------------
@app.command()
def summary(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the cross-domain report summary."""
    _setup_logging(verbose)
    biz = _get_app(config)

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Assembling report...", total=None)
        payload = biz.summary()

    console.print(Panel(
        "[bold cyan]" + payload.company_name + "[/bold cyan]\nGenerated on: "
        + payload.generated_at.strftime(biz.report_config.timestamp_format)
    ))
    for section in ("finance", "employees", "projects", "procurement", "sales", "files"):
        stats = payload.section(section).to_dict()
        console.print(_stats_table(section.title(), stats, failed=section in payload.failures))

    if payload.failures:
        for domain, message in payload.failures.items():
            console.print("[yellow]⚠[/yellow] " + domain + ": " + message)


# ------------------------------------------------------------------
# export
# ------------------------------------------------------------------
@app.command()
def export(
    fmt: str = typer.Argument(..., help="Format: pdf, xlsx, csv, chart-snapshot."),
    report_type: str = typer.Option(
        "summary", "--type", "-t",
        help="summary, dashboard, employees, invoices, expenses, projects, procurement.",
    ),
    output: str = typer.Option("data/exports", "--output", "-o", help="Output directory."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Export a report file."""
    _setup_logging(verbose)
    biz = _get_app(config)
    try:
        artifact = biz.export(fmt, report_type=report_type, output_dir=output)
    except DomainError as exc:
        _fail(str(exc))
    path = Path(output) / artifact.filename
    console.print(
        "[green]✔[/green] Export saved to: [bold]" + str(path) + "[/bold] ("
        + str(artifact.size) + " bytes)"
    )


# ------------------------------------------------------------------
# schedule / schedules
# ------------------------------------------------------------------
@app.command()
def schedule(
    cadence: str = typer.Argument(..., help="daily, weekly or monthly."),
    recipients: str = typer.Argument(..., help="Comma-separated e-mail addresses."),
    fmt: str = typer.Option("pdf", "--format", "-f", help="pdf or xlsx."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Schedule recurring report delivery."""
    _setup_logging(verbose)
    biz = _get_app(config, with_scheduler=True)
    addresses = [r.strip() for r in recipients.split(",") if r.strip()]
    try:
        info = biz.schedule_report(cadence, addresses, fmt)
    except DomainError as exc:
        _fail(str(exc))
    console.print(
        "[green]✔[/green] Scheduled " + info["cadence"] + " " + info["format"]
        + " report #" + str(info["id"]) + " for " + ", ".join(info["recipients"])
    )


@app.command()
def schedules(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List report schedules."""
    _setup_logging(verbose)
    biz = _get_app(config, with_scheduler=True)
    rows = biz.list_schedules()
    if not rows:
        console.print("[yellow]No report schedules.[/yellow]")
        return

    table = Table(title="Report Schedules", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Cadence")
    table.add_column("Format")
    table.add_column("Recipients", max_width=50)
    table.add_column("Active")
    for row in rows:
        table.add_row(
            str(row["id"]),
            row["cadence"],
            row["format"],
            ", ".join(row["recipients"]),
            "[green]✔[/green]" if row["active"] else "[red]✘[/red]",
        )
    console.print(table)


# ------------------------------------------------------------------
# serve / dashboard
# ------------------------------------------------------------------
@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="API server port."),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run the HTTP API with uvicorn."""
    _setup_logging(verbose)
    import uvicorn
    console.print("[bold cyan]Starting API on " + host + ":" + str(port) + "...[/bold cyan]")
    uvicorn.run("bizadmin.api.server:create_app", factory=True, host=host, port=port)


@app.command()
def dashboard(
    port: int = typer.Option(8501, "--port", "-p", help="Streamlit server port."),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Launch the Streamlit dashboard."""
    _setup_logging(verbose)
    console.print("[bold cyan]Launching dashboard on port " + str(port) + "...[/bold cyan]")
    import subprocess
    subprocess.run(
        ["streamlit", "run", "dashboard/app.py", "--server.port", str(port)],
        check=False,
    )


# ------------------------------------------------------------------
# status
# ------------------------------------------------------------------
@app.command()
def status(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show component status: database, scheduler, configuration."""
    _setup_logging(verbose)
    biz = _get_app(config, with_scheduler=True)

    table = Table(title="Component Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", min_width=15)
    table.add_column("Status", min_width=10)
    table.add_column("Details", max_width=50)
    for component, info in biz.get_status().items():
        if info["status"] == "ok":
            badge = "[green]✔ OK[/green]"
        elif info["status"] == "warning":
            badge = "[yellow]⚠ Warning[/yellow]"
        else:
            badge = "[red]✘ Error[/red]"
        table.add_row(component.title(), badge, info["details"])
    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
