"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, load_settings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = load_settings()

    table = Table(title="avhelp Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Endpoint", "OK", settings.endpoint)
    if settings.live_auth:
        table.add_row("Auth mode", "OK", "Live (server token), no AV-User header")
    else:
        table.add_row("Auth mode", "OK", "Local (AV-User header)")

    if settings.username:
        table.add_row("User", "OK", settings.username)
    elif settings.live_auth:
        table.add_row("User", "OPTIONAL", "Live auth does not need a stored username")
    else:
        table.add_row("User", "MISSING", "Run `avhelp login <username>`")

    table.add_row("Location tracking", "ON" if settings.location_enabled else "OFF", "AVHELP_LOCATION_ENABLED")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings.endpoint, settings))
    table.add_row("Backend connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] Check AVHELP_ENDPOINT or run `avhelp doctor setup`."
        )


@app.command()
def setup() -> None:
    """Interactive backend setup (stores config in the user config .env)."""

    settings = load_settings()

    endpoint = typer.prompt("Backend endpoint", default=settings.endpoint, show_default=True).strip()
    live_auth = typer.confirm("Use live (token) authentication?", default=settings.live_auth)
    location_enabled = typer.confirm("Enable location tracking?", default=settings.location_enabled)

    if not endpoint:
        raise typer.BadParameter("endpoint is required")

    env_path = write_user_env_vars(
        {
            "AVHELP_ENDPOINT": endpoint,
            "AVHELP_LIVE_AUTH": "true" if live_auth else "false",
            "AVHELP_LOCATION_ENABLED": "true" if location_enabled else "false",
        }
    )

    _console.print(f"[green]Saved backend config to:[/green] {env_path}")
