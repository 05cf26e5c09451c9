# --------------------------------------------------------------
# File: gateway.py
# Description: Contratos de los servicios externos que usa el flujo de acceso.
# --------------------------------------------------------------
"""Protocolos del servicio de autenticación y del directorio de pacientes.

Las implementaciones deben traducir sus excepciones propias a la jerarquía de
``patient_access.errors`` antes de devolver el control al flujo.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from patient_access.models import AuthSession, PatientRecord, SignInResult, SignUpResult

SIGNED_IN = "SIGNED_IN"

AuthListener = Callable[[str, Optional[AuthSession]], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class AuthGateway(Protocol):
    """Servicio de credenciales: alta, login, cierre y notificaciones de sesión."""

    def sign_up(self, email: str, password: str, *, redirect_to: str) -> SignUpResult:
        """Raises ``AuthServiceError`` si el alta es rechazada."""
        ...

    def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        """Raises ``AuthServiceError`` si las credenciales son rechazadas."""
        ...

    def sign_out(self) -> None: ...

    def on_auth_state_change(self, listener: AuthListener) -> Subscription: ...


class PatientDirectory(Protocol):
    """Procedimientos privilegiados y tabla ``patients`` protegida por RLS."""

    def check_patient_email(self, email: str) -> Any:
        """Devuelve las filas crudas; raises ``StatusLookupError``."""
        ...

    def mark_patient_registered(self) -> None:
        """Actúa sobre el usuario autenticado; raises ``MarkRegisteredError``."""
        ...

    def find_patient_by_email(self, email: str) -> Optional[PatientRecord]:
        """Cero o una ficha; raises ``PatientLookupError``."""
        ...
