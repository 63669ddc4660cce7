"""Canal de eventos "se necesita login".

Por qué un canal:
- Varias llamadas concurrentes pueden recibir 401 a la vez; el Core solo
  señaliza (quizá de forma redundante) y la capa de presentación decide qué
  mostrar y cómo deduplicar.
- El Core nunca toca estado de UI: solo emite.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)

LoginListener = Callable[[str], None]


class LoginSignal:
    """Emite eventos de login requerido a los suscriptores.

    Si se enlaza a un event loop (el de la capa de presentación), los
    suscriptores se ejecutan en ese loop, venga de donde venga la respuesta de
    red. Sin loop enlazado, se ejecutan en línea.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._listeners: list[LoginListener] = []

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        self._loop = loop

    def subscribe(self, listener: LoginListener) -> Callable[[], None]:
        """Registra `listener` y devuelve la función que lo da de baja."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, reason: str = "unauthorized") -> None:
        listeners = list(self._listeners)
        if not listeners:
            logger.debug("Login requested (%s) with no listeners", reason)
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            self._dispatch(listeners, reason)
            return
        loop.call_soon_threadsafe(self._dispatch, listeners, reason)

    @staticmethod
    def _dispatch(listeners: list[LoginListener], reason: str) -> None:
        for listener in listeners:
            try:
                listener(reason)
            except Exception:
                logger.exception("Login listener failed")
