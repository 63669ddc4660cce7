"""Contexto explícito de la aplicación.

Sustituye el estado global del proceso: endpoint, autenticación, backend y
canal de login viajan juntos en un objeto que se construye una vez y se pasa a
quien lo necesite.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from adapters.http_backend import HttpBackendService
from core.config import AppSettings
from core.domain.auth import UserAuth
from core.interfaces.backend import BackendService
from core.services.login_signal import LoginSignal


@dataclass
class Environment:
    """Colaboradores compartidos por la CLI y los servicios."""

    settings: AppSettings
    user_auth: UserAuth
    login_signal: LoginSignal
    backend: BackendService

    @property
    def endpoint(self) -> str:
        return self.settings.endpoint

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Environment":
        settings = settings or AppSettings()
        user_auth = UserAuth(username=settings.username, live_auth=settings.live_auth)
        login_signal = LoginSignal()
        backend = HttpBackendService(
            settings.endpoint,
            user_auth,
            login_signal,
            settings=settings,
            transport=transport,
        )
        return cls(
            settings=settings,
            user_auth=user_auth,
            login_signal=login_signal,
            backend=backend,
        )
