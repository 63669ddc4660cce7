"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import MLocation, MProfile, MProfilePicture


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("avhelp", style="bold cyan")
    subtitle = Text("Mensajes • Peticiones de ayuda • Ubicación", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_profile_table(profile: MProfile) -> Table:
    table = Table(title=f"Profile: {profile.username}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Username", profile.username)
    table.add_row("Name", profile.display_name or "-")
    table.add_row("Picture", profile.picture_url or "-")
    situations = ", ".join(area.situation for area in profile.help_areas)
    table.add_row("Help areas", situations or "-")
    return table


def build_location_panel(location: MLocation) -> Panel:
    body = Text(f"{location.latitude:.6f}, {location.longitude:.6f}")
    return Panel(body, title=f"Location of {location.username}", border_style="green")


def build_picture_panel(picture: MProfilePicture) -> Panel:
    return Panel(Text(picture.url, style="magenta"), title="Profile picture", border_style="green")


def build_login_panel(reason: str) -> Panel:
    """Panel de sesión expirada (equivalente a presentar la pantalla de login)."""

    body = Text()
    body.append("Your session is no longer valid", style="bold")
    body.append(f" ({reason}).\n\n")
    body.append("Run ", style="dim")
    body.append("avhelp login <username>", style="bold cyan")
    body.append(" to sign in again.", style="dim")
    return Panel(body, title=Text("Login required", style="bold yellow"), border_style="yellow")
