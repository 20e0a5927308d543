"""Admin commands for config initialization and serving the API."""

import sys

import uvicorn
from rich.console import Console

from medidash.config import create_default_config, get_config_path

console = Console()


def init_command(force: bool = False) -> None:
    """Create the medidash config file."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'medidash init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Config file created (permissions: 600)")
    console.print("[dim]Fill in [medibill] email and password, or set API_EMAIL and API_PASSWORD[/dim]")


def serve_command(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the revenue data API."""
    console.print(f"[cyan]Serving medidash API on http://{host}:{port}[/cyan]")
    uvicorn.run("medidash.api:app", host=host, port=port, reload=reload)
