"""Casos de uso del perfil y del seguimiento de ubicación.

Este módulo recoge el comportamiento no visual de la pantalla de perfil
(refrescar, editar áreas de ayuda, foto, logout) y del envío de ubicación.
La capa de presentación solo muestra los resultados.
"""

from __future__ import annotations

import logging
from typing import Iterable

from core.domain.auth import UserAuth
from core.domain.models import (
    Coordinate,
    MHelpArea,
    MHelpAreaList,
    MHelpAreasRequest,
    MLocation,
    MProfile,
    MProfilePicture,
    MProfileRequest,
)
from core.domain.result import BackendResult
from core.interfaces.backend import BackendService

logger = logging.getLogger(__name__)


class ProfileService:
    """Operaciones sobre el perfil del usuario con sesión iniciada."""

    def __init__(self, backend: BackendService, user_auth: UserAuth) -> None:
        self._backend = backend
        self._user_auth = user_auth

    async def refresh_profile(self) -> BackendResult[MProfile]:
        return await self._backend.read(MProfileRequest(), MProfile)

    async def load_help_areas(self) -> BackendResult[MHelpAreaList]:
        request = MHelpAreasRequest(username=self._user_auth.username)
        return await self._backend.read(request, MHelpAreaList)

    async def update_help_areas(self, areas: Iterable[MHelpArea]) -> BackendResult[MHelpAreaList]:
        request = MHelpAreasRequest(help_areas=list(areas))
        return await self._backend.update(request, MHelpAreaList)

    async def upload_picture(self, image_data: bytes) -> BackendResult[MProfilePicture]:
        return await self._backend.upload_profile_picture(image_data)

    def log_out(self) -> None:
        self._user_auth.log_out()


class LocationTracker:
    """Envía la ubicación del usuario cuando el seguimiento está activado."""

    def __init__(self, backend: BackendService, user_auth: UserAuth, *, enabled: bool = False) -> None:
        self._backend = backend
        self._user_auth = user_auth
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    async def report(self, coordinate: Coordinate) -> BackendResult[MLocation]:
        """Envía `coordinate` con `update`; sin red si no procede."""

        username = self._user_auth.username
        if not self._enabled or not username:
            logger.debug("Location not sent (enabled=%s, user=%s)", self._enabled, username)
            return BackendResult.failure()

        return await self._backend.update(coordinate.to_location(username), MLocation)
