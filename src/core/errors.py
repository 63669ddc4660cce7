"""Errores del acceso al backend.

Se lanzan dentro del adaptador HTTP y se colapsan en `BackendResult.failure()`
en el borde del dispatcher. El llamador nunca los ve; sirven para el log.
"""

from __future__ import annotations


class BackendError(Exception):
    """Base de todos los fallos de una llamada al backend."""


class EncodingError(BackendError):
    """La petición no se pudo serializar; no se intenta la llamada de red."""


class UnauthorizedError(BackendError):
    """El backend respondió 401."""


class TransportError(BackendError):
    """Fallo de red (conexión, timeout, protocolo)."""


class DecodingError(BackendError):
    """La respuesta no existe o no valida contra el tipo esperado."""
