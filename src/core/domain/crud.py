"""Operaciones CRUD y su método HTTP.

Por qué en el dominio:
- La intención lógica (crear/leer/actualizar/borrar) es un concepto del
  problema; el verbo HTTP es solo su representación en el cable.
- El mapeo es fijo y total, así que vive junto a los modelos y no en el adaptador.
"""

from __future__ import annotations

from enum import Enum


class CrudType(str, Enum):
    """Intención lógica detrás de una petición."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class HttpMethod(str, Enum):
    """Métodos HTTP usados por el backend REST."""

    POST = "POST"
    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def from_crud(cls, crud: CrudType) -> "HttpMethod":
        return _CRUD_TO_METHOD[crud]

    @property
    def to_crud(self) -> CrudType:
        return _METHOD_TO_CRUD[self]


_CRUD_TO_METHOD: dict[CrudType, HttpMethod] = {
    CrudType.CREATE: HttpMethod.POST,
    CrudType.READ: HttpMethod.GET,
    CrudType.UPDATE: HttpMethod.PUT,
    CrudType.DELETE: HttpMethod.DELETE,
}

_METHOD_TO_CRUD: dict[HttpMethod, CrudType] = {v: k for k, v in _CRUD_TO_METHOD.items()}
