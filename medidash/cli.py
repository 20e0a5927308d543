"""CLI entry point for medidash."""

import logging

import typer
from rich.logging import RichHandler

from medidash.commands.admin import init_command, serve_command
from medidash.commands.report import months_command, report_command

app = typer.Typer(
    name="medidash",
    help="Monthly invoiced and received revenue per Medibill practitioner",
    add_completion=False,
)


def configure_logging(verbose: bool) -> None:
    """Send log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Monthly invoiced and received revenue per Medibill practitioner."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Create the medidash configuration file."""
    init_command(force)


@app.command(name="months")
def months(
    count: int = typer.Option(12, "--count", "-n", help="Number of months to list"),
) -> None:
    """List the months you can report on."""
    months_command(count)


@app.command(name="report")
def report(
    month: str = typer.Option(None, "--month", "-m", help="Reporting month (YYYY-MM, default: current month)"),
    sort_by: str = typer.Option("name", "--sort-by", "-s", help="Sort by 'name', 'account', 'invoiced' or 'received'"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
    filter_text: str = typer.Option(None, "--filter", "-f", help="Only show doctors whose name or account matches"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Show invoiced and received amounts per practitioner for a month."""
    if verbose:
        configure_logging(verbose)
    report_command(month, sort_by, desc, filter_text)


@app.command(name="serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Serve the revenue data API."""
    serve_command(host, port, reload)


if __name__ == "__main__":
    app()
