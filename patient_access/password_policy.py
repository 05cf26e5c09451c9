# --------------------------------------------------------------
# File: password_policy.py
# Description: Reglas mínimas de contraseña para completar el registro del paciente.
# --------------------------------------------------------------
"""Validación local de contraseñas previa al alta en el servicio de autenticación."""

from __future__ import annotations

from typing import List, Tuple

from patient_access.errors import FormValidationError

MIN_LENGTH = 6

MISMATCH = "Passwords don't match"
TOO_SHORT = f"Password must be at least {MIN_LENGTH} characters long"


def check_registration_passwords(password: str, confirm_password: str) -> Tuple[bool, List[str]]:
    """Evalúa la contraseña elegida y su confirmación.

    Args:
        password (str): Contraseña propuesta.
        confirm_password (str): Repetición introducida por el paciente.

    Returns:
        Tuple[bool, List[str]]: Cumplimiento y motivos de rechazo, con la
        discrepancia siempre en primer lugar.

    """

    reasons: List[str] = []
    if password != confirm_password:
        reasons.append(MISMATCH)
    if len(password) < MIN_LENGTH:
        reasons.append(TOO_SHORT)
    return not reasons, reasons


def ensure_registration_passwords(password: str, confirm_password: str) -> None:
    """Lanza ``FormValidationError`` con el primer motivo de rechazo."""

    ok, reasons = check_registration_passwords(password, confirm_password)
    if not ok:
        raise FormValidationError(reasons[0])
