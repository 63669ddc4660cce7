"""Estado de autenticación de la sesión."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UserAuth:
    """Usuario actual y modo de autenticación.

    - `live_auth=True`: el servidor emite/valida un token; el cliente no manda
      su username.
    - `live_auth=False`: modo local; el dispatcher añade la cabecera `AV-User`.

    Lo lee el dispatcher en cada llamada y solo lo mutan login/logout.
    """

    username: str | None = None
    live_auth: bool = False

    @property
    def is_logged_in(self) -> bool:
        return bool(self.username)

    def log_in(self, username: str) -> None:
        username = username.strip()
        if not username:
            raise ValueError("username must not be empty")
        self.username = username

    def log_out(self) -> None:
        self.username = None
