"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Las peticiones se serializan a JSON y las respuestas se validan desde JSON;
  Pydantic nos da ambas direcciones con un único contrato tipado.
- Los alias camelCase mantienen el formato de cable del backend sin ensuciar
  los nombres Python.

Nota:
- Estos modelos describen *qué* se envía y recibe, no *cómo* viaja (eso es el
  adaptador HTTP).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from core.domain.crud import CrudType


class BackendRequest(BaseModel):
    """Contrato de una petición REST tipada.

    Cada variante declara:
    - `resource`: segmento de ruta del recurso en el backend.
    - parámetros de query por operación (`get_parameters`).
    - si la operación viaja sin cuerpo (`has_empty_body`).
    - si un 401 debe pedir login (`can_request_login`).

    Los defaults son seguros para cualquier operación: sin parámetros, con
    cuerpo y pidiendo login.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    resource: ClassVar[str] = ""

    def get_parameters(self, crud: CrudType) -> Mapping[str, Any]:
        return {}

    def has_empty_body(self, crud: CrudType) -> bool:
        return False

    def can_request_login(self, crud: CrudType) -> bool:
        return True


class BackendResponse(BaseModel):
    """Contrato de una respuesta REST: cualquier modelo validable desde JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


@dataclass(frozen=True)
class Coordinate:
    """Coordenada geográfica tal como la entrega el proveedor de ubicación."""

    latitude: float
    longitude: float

    def to_location(self, username: str) -> "MLocation":
        return MLocation(latitude=self.latitude, longitude=self.longitude, username=username)


class MLocation(BackendRequest, BackendResponse):
    """Ubicación de un usuario.

    Es petición (se envía con `update` al recurso `location`) y también
    respuesta (el backend devuelve la ubicación almacenada).
    """

    resource: ClassVar[str] = "location"

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitud en grados.")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Longitud en grados.")
    username: str = Field(..., min_length=1, description="Usuario al que pertenece la ubicación.")

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class MHelpArea(BackendResponse):
    """Situación en la que el usuario ofrece ayuda."""

    situation: str = Field(..., min_length=1, description="Descripción corta de la situación.")


class MProfileRequest(BackendRequest):
    """Lectura del perfil del usuario actual.

    El usuario lo identifica la autenticación, así que ninguna operación lleva
    parámetros ni cuerpo.
    """

    resource: ClassVar[str] = "profile"

    def has_empty_body(self, crud: CrudType) -> bool:
        return True


class MHelpAreasRequest(BackendRequest):
    """Áreas de ayuda del usuario (pantalla de edición del perfil)."""

    resource: ClassVar[str] = "helpareas"

    help_areas: list[MHelpArea] = Field(default_factory=list)
    username: str | None = Field(default=None, exclude=True)

    def get_parameters(self, crud: CrudType) -> Mapping[str, Any]:
        if crud is CrudType.READ and self.username:
            return {"username": self.username}
        return {}

    def has_empty_body(self, crud: CrudType) -> bool:
        return crud is CrudType.DELETE


class MProfile(BackendResponse):
    """Perfil público del usuario."""

    username: str = Field(..., min_length=1)
    display_name: str | None = Field(default=None)
    help_areas: list[MHelpArea] = Field(default_factory=list)
    picture_url: str | None = Field(default=None)


class MHelpAreaList(BackendResponse):
    help_areas: list[MHelpArea] = Field(default_factory=list)


class MProfilePicture(BackendResponse):
    """Resultado de subir la foto de perfil."""

    url: str = Field(..., min_length=1, description="URL pública de la imagen subida.")
