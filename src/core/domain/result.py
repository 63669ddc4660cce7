"""Resultado de una llamada al backend.

Por qué un tipo propio:
- Cada llamada despachada entrega exactamente un resultado: éxito con valor o
  fallo sin valor. No hay estados intermedios.
- El llamador no distingue la causa del fallo; la causa queda en los logs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class BackendResult(Generic[T]):
    """Resultado etiquetado: `success` es cierto si y solo si hay `value`."""

    success: bool
    value: T | None = None

    def __post_init__(self) -> None:
        if self.success != (self.value is not None):
            raise ValueError("success must be True exactly when a value is present")

    @classmethod
    def ok(cls, value: T) -> "BackendResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def failure(cls) -> "BackendResult[T]":
        return cls(success=False, value=None)
