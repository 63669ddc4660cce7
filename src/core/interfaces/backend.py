"""Contrato del servicio de backend.

Por qué Protocol:
- Los servicios del Core dependen de esta abstracción, no de httpx.
- Permite sustituir el backend HTTP por un doble en tests o por otro
  transporte sin tocar los consumidores.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from core.domain.models import BackendRequest, BackendResponse, MProfilePicture
from core.domain.result import BackendResult

Res = TypeVar("Res", bound=BackendResponse)


@runtime_checkable
class BackendService(Protocol):
    """Las cuatro operaciones CRUD más la subida de la foto de perfil.

    Reglas de diseño:
    - Todas son asíncronas porque hacen I/O de red.
    - Cada llamada devuelve exactamente un `BackendResult`; nunca lanza por
      fallos de red, codificación o autenticación.
    """

    async def create(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        ...

    async def read(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        ...

    async def update(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        ...

    async def delete(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        ...

    async def upload_profile_picture(self, image_data: bytes) -> BackendResult[MProfilePicture]:
        ...
