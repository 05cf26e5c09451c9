# --------------------------------------------------------------
# File: registration_latch.py
# Description: Cerrojo de un solo uso para marcar al paciente como registrado.
# --------------------------------------------------------------
"""Garantiza como máximo un marcado efectivo por flujo montado."""

import threading
from enum import Enum


class LatchState(str, Enum):
    ARMED = "armed"
    CLAIMED = "claimed"
    MARKED = "marked"


class RegistrationLatch:
    """Transiciones ``ARMED -> CLAIMED -> MARKED`` protegidas por un lock.

    ``release`` devuelve un intento fallido a ``ARMED`` para que la otra vía
    (respuesta directa o notificación de sesión) pueda reintentarlo.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = LatchState.ARMED

    @property
    def state(self) -> LatchState:
        return self._state

    @property
    def marked(self) -> bool:
        return self._state is LatchState.MARKED

    def try_claim(self) -> bool:
        with self._lock:
            if self._state is not LatchState.ARMED:
                return False
            self._state = LatchState.CLAIMED
            return True

    def confirm(self) -> None:
        with self._lock:
            if self._state is LatchState.CLAIMED:
                self._state = LatchState.MARKED

    def release(self) -> None:
        with self._lock:
            if self._state is LatchState.CLAIMED:
                self._state = LatchState.ARMED
