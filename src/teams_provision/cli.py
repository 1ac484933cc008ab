"""CLI interface for teams-provision."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, load_config
from .graph_client import AuthError, GraphClient, acquire_token
from .input_reader import InputError, load_rows
from .logging_utils import mask, redact_secrets, setup_logging
from .models import BatchSummary, OutcomeStatus, ProvisioningOutcome
from .provision import BatchRunner, validate_row

app = typer.Typer(
    name="teams-provision",
    help="Bulk-provision Microsoft 365 groups and Teams from a CSV file",
    no_args_is_help=True,
)
console = Console()

_STATUS_STYLE = {
    OutcomeStatus.SUCCEEDED: "[green]✓ Succeeded[/green]",
    OutcomeStatus.SUCCEEDED_WITH_WARNINGS: "[yellow]! Warnings[/yellow]",
    OutcomeStatus.FAILED: "[red]✗ Failed[/red]",
}

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to YAML config file"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose/debug output"),
]


def get_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from file and environment."""
    try:
        return load_config(config_path)
    except (ConfigError, ValueError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1) from None


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"teams-provision {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Bulk-provision Microsoft 365 groups and Teams."""


def _print_outcome(index: int, outcome: ProvisioningOutcome) -> None:
    status = _STATUS_STYLE[outcome.status]
    console.print(f"  {index:>4}  {status}  [cyan]{outcome.row.mail_nickname or '-'}[/cyan]")


def _results_table(outcomes: list[ProvisioningOutcome]) -> Table:
    table = Table(title="Provisioning Results")
    table.add_column("Line", style="dim", justify="right")
    table.add_column("MailNickName", style="cyan")
    table.add_column("Group", style="blue")
    table.add_column("Members", justify="right")
    table.add_column("Team")
    table.add_column("Status")
    table.add_column("Detail", style="dim")

    for outcome in outcomes:
        if outcome.group_id:
            group = "created" if outcome.group_created else "existing"
        else:
            group = "-"
        detail = outcome.failed_kind.value if outcome.failed_kind else ""
        if not detail and outcome.warnings:
            detail = ", ".join(sorted({w.kind.value for w in outcome.warnings}))
        table.add_row(
            str(outcome.row.line_number or ""),
            outcome.row.mail_nickname or "-",
            group,
            str(outcome.members_added),
            "✓" if outcome.team_id else "-",
            _STATUS_STYLE[outcome.status],
            detail,
        )
    return table


@app.command()
def run(
    input_path: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Input CSV (default: PROVISION_INPUT_PATH)"),
    ] = None,
    error_log: Annotated[
        Path | None,
        typer.Option(
            "--error-log",
            "-e",
            help="Error log CSV, recreated on every run (default: PROVISION_ERROR_LOG_PATH)",
        ),
    ] = None,
    settle_delay: Annotated[
        float | None,
        typer.Option("--settle-delay", min=0, help="Seconds to wait before creating each team"),
    ] = None,
    recheck_delay: Annotated[
        float | None,
        typer.Option(
            "--recheck-delay",
            min=0,
            help="Seconds to wait before re-checking a team after a failed create",
        ),
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Provision a group and team for every row of the input CSV.

    Rows are processed one at a time. A failing row is written to the error
    log and the batch moves on to the next row. Re-running with the same input
    is safe: existing groups and members are reused.

    Examples:

        # Provision from classes.csv, errors to provision-errors.csv
        teams-provision run --input classes.csv

        # Custom error log and shorter settle delay
        teams-provision run -i classes.csv -e errors.csv --settle-delay 10
    """
    handler = setup_logging(verbose, console)
    config = get_config(config_path)
    redact_secrets(handler, config.graph.client_secret)

    settings = config.provision
    if input_path is not None:
        settings.input_path = input_path
    if error_log is not None:
        settings.error_log_path = error_log
    if settle_delay is not None:
        settings.settle_delay_seconds = settle_delay
    if recheck_delay is not None:
        settings.recheck_delay_seconds = recheck_delay

    # Load rows before authenticating so a bad input file fails fast
    try:
        rows = load_rows(settings.input_path)
    except InputError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    try:
        token = acquire_token(config.graph)
    except AuthError as e:
        console.print(f"[red]Authentication failed: {e}[/red]")
        raise typer.Exit(1) from None
    redact_secrets(handler, token)

    console.print(f"[bold]Provisioning {len(rows)} row(s) from {settings.input_path}...[/bold]\n")

    with GraphClient(token, config.graph.base_url, config.graph.timeout) as client:
        runner = BatchRunner(client, settings)
        outcomes = runner.run(rows, on_outcome=_print_outcome)

    console.print()
    console.print(_results_table(outcomes))

    summary = BatchSummary.from_outcomes(outcomes)
    console.print(
        f"\n[bold]Summary:[/bold] {summary.rows} row(s), "
        f"[green]{summary.succeeded} succeeded[/green], "
        f"[yellow]{summary.succeeded_with_warnings} with warnings[/yellow], "
        f"[red]{summary.failed} failed[/red]"
    )
    console.print(
        f"Groups created: {summary.groups_created}, existing: {summary.groups_existing}, "
        f"teams: {summary.teams_provisioned}, members added: {summary.members_added}"
    )
    console.print(f"Error log: {settings.error_log_path} ({summary.error_records} record(s))")
    if runner.error_log.write_failures:
        console.print(
            f"[red]{runner.error_log.write_failures} error record(s) could not be written "
            f"to {settings.error_log_path}[/red]"
        )

    if not summary.success:
        raise typer.Exit(1)


@app.command()
def validate(
    input_path: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Input CSV (default: PROVISION_INPUT_PATH)"),
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Check the input CSV for missing mandatory fields without calling the directory."""
    setup_logging(verbose, console)
    config = get_config(config_path)
    path = input_path or config.provision.input_path

    try:
        rows = load_rows(path)
    except InputError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    table = Table(title="Invalid Rows")
    table.add_column("Line", style="dim", justify="right")
    table.add_column("MailNickName", style="cyan")
    table.add_column("DisplayName")
    table.add_column("Problem", style="red")

    invalid = 0
    for row in rows:
        result = validate_row(row)
        if not result.ok:
            invalid += 1
            table.add_row(
                str(row.line_number or ""),
                row.mail_nickname or "-",
                row.display_name or "-",
                result.message,
            )

    if invalid:
        console.print(table)
        console.print(f"[red]{invalid} of {len(rows)} row(s) are invalid[/red]")
        raise typer.Exit(1)
    console.print(f"[green]All {len(rows)} row(s) are valid[/green]")


@app.command()
def config_show(config_path: ConfigOption = None) -> None:
    """Show current configuration (with secrets masked)."""
    config = get_config(config_path)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    graph = config.graph
    table.add_row("Tenant ID", graph.tenant_id or "[red]Not set[/red]")
    table.add_row("Client ID", graph.client_id or "[red]Not set[/red]")
    table.add_row("Client Secret", mask(graph.client_secret) or "[red]Not set[/red]")
    table.add_row("Graph URL", graph.base_url)
    table.add_row("Timeout", f"{graph.timeout:g}s")

    settings = config.provision
    table.add_row("Input", str(settings.input_path))
    table.add_row("Error Log", str(settings.error_log_path))
    table.add_row("Settle Delay", f"{settings.settle_delay_seconds:g}s")
    table.add_row("Recheck Delay", f"{settings.recheck_delay_seconds:g}s")

    console.print(table)


if __name__ == "__main__":
    app()
