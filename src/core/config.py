"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el adaptador HTTP y los servicios lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import httpx
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "avhelp"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "avhelp"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "avhelp"
    return Path.home() / ".config" / "avhelp"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def read_env_file(path: Path) -> dict[str, str]:
    """Lee un fichero .env; vacío si no existe."""

    if not path.exists():
        return {}
    return _parse_env_lines(path.read_text(encoding="utf-8"))


def _read_user_env() -> dict[str, str]:
    return read_env_file(get_user_env_file())


def _write_user_env(values: dict[str, str]) -> Path:
    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    lines = ["# avhelp user config (.env)"]
    for key in sorted(values.keys()):
        lines.append(f"{key}={values[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    existing = _read_user_env()
    existing.update({k: v for k, v in values.items() if v is not None})
    return _write_user_env(existing)


def remove_user_env_vars(keys: list[str]) -> Path:
    """Elimina variables del .env global del usuario (p.ej. al hacer logout)."""

    existing = _read_user_env()
    for key in keys:
        existing.pop(key, None)
    return _write_user_env(existing)


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="AVHELP_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    endpoint: str = Field(
        default="http://localhost:8080/api",
        min_length=8,
        description="URL base del backend REST.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="avhelp/0.1",
        min_length=1,
        description="User-Agent para peticiones al backend.",
    )

    username: str | None = Field(
        default=None,
        description="Usuario con sesión iniciada (modo de autenticación local).",
    )
    live_auth: bool = Field(
        default=False,
        description="Autenticación por token del servidor; desactiva la cabecera AV-User.",
    )

    location_enabled: bool = Field(
        default=False,
        description="Envío de ubicación activado por el usuario.",
    )

    @field_validator("endpoint")
    @classmethod
    def check_endpoint(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid endpoint URL: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("endpoint must be an absolute http(s) URL")
        return value


def load_settings() -> AppSettings:
    """Carga la configuración resolviendo el .env de usuario en este momento.

    `AppSettings.model_config` fija la ruta del .env de usuario al importar el
    módulo; la CLI la vuelve a calcular para leer lo que acaba de escribir.
    """

    return AppSettings(_env_file=(".env", str(get_user_env_file())))
