# --------------------------------------------------------------
# File: models.py
# Description: Modelos tipados que circulan entre el flujo y los servicios externos.
# --------------------------------------------------------------
"""Modelos Pydantic del acceso de pacientes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from patient_access.errors import StatusLookupError


class FormMode(str, Enum):
    """Modo del formulario derivado del estado del paciente."""

    LOGIN = "login"
    REGISTRATION = "registration"


class EmailStatusRow(BaseModel):
    """Fila devuelta por el procedimiento ``check_patient_email``."""

    model_config = ConfigDict(extra="ignore")

    email_exists: bool
    is_registered: bool


class PatientStatus(BaseModel):
    """Indicadores de existencia y registro de un email candidato.

    Attributes:
        email_exists (bool): El email pertenece a un paciente dado de alta por su psicólogo.
        is_registered (bool): El paciente ya creó sus credenciales.

    """

    model_config = ConfigDict(frozen=True)

    email_exists: bool = False
    is_registered: bool = False

    @classmethod
    def not_found(cls) -> "PatientStatus":
        """Estado por defecto ante ausencia o error: cerrado."""

        return cls(email_exists=False, is_registered=False)

    @property
    def form_mode(self) -> FormMode:
        if self.email_exists and not self.is_registered:
            return FormMode.REGISTRATION
        return FormMode.LOGIN


def parse_status_rows(payload: Any) -> PatientStatus:
    """Convierte la respuesta del procedimiento en un ``PatientStatus``.

    Args:
        payload (Any): Datos crudos devueltos por la llamada RPC.

    Returns:
        PatientStatus: Estado de la primera fila, o ``not_found`` si no hay filas.

    Raises:
        StatusLookupError: Si la respuesta no es una lista de filas válidas.

    """

    if payload is None:
        return PatientStatus.not_found()
    if not isinstance(payload, list):
        raise StatusLookupError(f"Unexpected lookup payload: {type(payload).__name__}")
    if not payload:
        return PatientStatus.not_found()
    try:
        row = EmailStatusRow.model_validate(payload[0])
    except ValidationError as exc:
        raise StatusLookupError(f"Malformed lookup row: {exc.error_count()} error(s)") from exc
    return PatientStatus(email_exists=row.email_exists, is_registered=row.is_registered)


class PatientRecord(BaseModel):
    """Ficha de paciente leída de la tabla ``patients``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    email: str
    psychologist_id: Optional[str] = None


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None


class SignUpResult(BaseModel):
    """Resultado del alta; ``session`` es ``None`` si falta confirmar el email."""

    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


class SignInResult(BaseModel):
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


class LocalSession(BaseModel):
    """Copia local, no autoritativa, de la ficha del paciente tras el login."""

    id: str
    name: str
    email: str
    psychologist_id: Optional[str] = None
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class OutcomeKind(str, Enum):
    REGISTERED = "registered"
    CONFIRMATION_PENDING = "confirmation_pending"
    REGISTRATION_FAILED = "registration_failed"
    LOGGED_IN = "logged_in"
    ACCESS_DENIED = "access_denied"
    LOGIN_FAILED = "login_failed"


class SubmitOutcome(BaseModel):
    """Notificación resultante de un envío del formulario.

    Attributes:
        kind (OutcomeKind): Tipo de resultado.
        title (str): Título breve para la notificación.
        description (str): Texto detallado mostrado al usuario.
        destructive (bool): Indica si se presenta como error.
        redirect_to (Optional[str]): Destino de navegación, solo tras un login válido.

    """

    kind: OutcomeKind
    title: str
    description: str
    destructive: bool = False
    redirect_to: Optional[str] = None
