"""CLI principal (Typer).

Por qué la CLI es la "shell" de la aplicación:
- Es la única capa que presenta cosas al usuario, así que es quien escucha
  `LoginSignal` y decide mostrar (una sola vez) el aviso de login.
- Los comandos solo orquestan servicios del Core y pintan resultados.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, NoReturn, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import (
    build_location_panel,
    build_login_panel,
    build_picture_panel,
    build_profile_table,
    print_banner,
)
from core.config import load_settings, read_env_file, remove_user_env_vars, write_user_env_vars
from core.domain.auth import UserAuth
from core.domain.models import Coordinate
from core.domain.result import BackendResult
from core.environment import Environment
from core.services.profile_service import LocationTracker, ProfileService

T = TypeVar("T")

USERNAME_VAR = "AVHELP_USERNAME"

app = typer.Typer(no_args_is_help=True, help="Backend client for the help-request app.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


class LoginPrompt:
    """Muestra el aviso de login como mucho una vez mientras esté pendiente.

    Varias llamadas concurrentes pueden recibir 401; el Core señaliza cada
    una y aquí se deduplica.
    """

    def __init__(self, console: Console) -> None:
        self._console = console
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def __call__(self, reason: str) -> None:
        if self._pending:
            return
        self._pending = True
        self._console.print(build_login_panel(reason))


def build_environment() -> Environment:
    return Environment.from_settings(load_settings())


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _run_call(env: Environment, call: Callable[[], Awaitable[BackendResult[T]]]) -> BackendResult[T]:
    """Ejecuta una llamada al backend con la shell escuchando `LoginSignal`."""

    prompt = LoginPrompt(_console)
    unsubscribe = env.login_signal.subscribe(prompt)

    async def runner() -> BackendResult[T]:
        env.login_signal.bind_loop(asyncio.get_running_loop())
        try:
            result = await call()
            # Deja correr los avisos programados en el loop antes de cerrarlo.
            await asyncio.sleep(0)
            return result
        finally:
            env.login_signal.bind_loop(None)

    try:
        return asyncio.run(runner())
    finally:
        unsubscribe()


def _fail(message: str) -> NoReturn:
    _console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    banner: bool = typer.Option(False, "--banner", help="Show the welcome banner."),
) -> None:
    _configure_logging(verbose)
    if banner:
        print_banner(_console)


@app.command()
def login(username: str = typer.Argument(..., help="Username for local authentication.")) -> None:
    """Sign in with a username (stored in the user config .env)."""

    auth = UserAuth()
    try:
        auth.log_in(username)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    env_path = write_user_env_vars({USERNAME_VAR: auth.username})
    _console.print(f"[green]Signed in as[/green] {auth.username} [dim]({env_path})[/dim]")


def _username_source() -> str:
    """Dónde sigue definido el username tras borrarlo del .env de usuario."""

    if any(name.upper() == USERNAME_VAR for name in os.environ):
        return "the environment"
    project_env = Path(".env")
    if any(name.upper() == USERNAME_VAR for name in read_env_file(project_env)):
        return f"the project .env ({project_env.resolve()})"
    return "the configuration"


@app.command()
def logout() -> None:
    """Forget the stored username."""

    env_path = remove_user_env_vars([USERNAME_VAR])
    remaining = load_settings().username
    if remaining:
        _fail(f"{USERNAME_VAR}={remaining} is still set in {_username_source()}; remove it to sign out.")
    _console.print(f"[green]Signed out[/green] [dim]({env_path})[/dim]")


@app.command()
def profile() -> None:
    """Refresh and show the current profile."""

    env = build_environment()
    service = ProfileService(env.backend, env.user_auth)
    result = _run_call(env, service.refresh_profile)
    if not result.success or result.value is None:
        _fail("Could not load the profile.")
    _console.print(build_profile_table(result.value))


@app.command()
def location(
    latitude: float = typer.Argument(..., help="Latitude in degrees."),
    longitude: float = typer.Argument(..., help="Longitude in degrees."),
) -> None:
    """Report a location (requires AVHELP_LOCATION_ENABLED=true)."""

    env = build_environment()
    if not env.settings.location_enabled:
        _fail("Location tracking is disabled (set AVHELP_LOCATION_ENABLED=true).")
    if not env.user_auth.is_logged_in:
        _fail("No user signed in. Run `avhelp login <username>` first.")

    tracker = LocationTracker(env.backend, env.user_auth, enabled=True)
    coordinate = Coordinate(latitude=latitude, longitude=longitude)
    result = _run_call(env, lambda: tracker.report(coordinate))
    if not result.success or result.value is None:
        _fail("Could not send the location.")
    _console.print(build_location_panel(result.value))


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Image file."),
) -> None:
    """Upload a profile picture."""

    env = build_environment()
    service = ProfileService(env.backend, env.user_auth)
    data = path.read_bytes()
    result = _run_call(env, lambda: service.upload_picture(data))
    if not result.success or result.value is None:
        _fail("Could not upload the picture.")
    _console.print(build_picture_panel(result.value))


def run() -> None:
    app()
