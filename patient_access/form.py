# --------------------------------------------------------------
# File: form.py
# Description: Máquina de estados del formulario de acceso (login o registro).
# --------------------------------------------------------------
"""Estado del formulario y reglas de habilitación del envío."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from patient_access.models import FormMode, PatientStatus

NOT_FOUND_HINT = "Email not found. Please contact your psychologist."


class FormState(str, Enum):
    UNKNOWN = "unknown"
    NOT_FOUND = "not_found"
    REGISTRATION = "registration"
    LOGIN = "login"


@dataclass
class PatientForm:
    """Campos del formulario y modo derivado del último estado resuelto.

    El modo solo se aparta de ``status.form_mode`` tras ``reset_to_login``.
    """

    email: str = ""
    password: str = ""
    confirm_password: str = ""
    loading: bool = False
    status: Optional[PatientStatus] = None
    mode: FormMode = field(default=FormMode.LOGIN)

    def apply_status(self, status: PatientStatus) -> None:
        self.status = status
        self.mode = status.form_mode

    def reset_to_login(self) -> None:
        """Vuelve a modo login tras un registro y limpia ambas contraseñas."""

        self.mode = FormMode.LOGIN
        self.password = ""
        self.confirm_password = ""

    @property
    def email_exists(self) -> bool:
        return bool(self.status and self.status.email_exists)

    @property
    def state(self) -> FormState:
        if self.status is None:
            return FormState.UNKNOWN
        if self.mode is FormMode.REGISTRATION:
            return FormState.REGISTRATION
        if not self.status.email_exists:
            return FormState.NOT_FOUND
        return FormState.LOGIN

    @property
    def show_not_found_hint(self) -> bool:
        return "@" in self.email and not self.email_exists

    def can_submit(self) -> bool:
        """Replica la habilitación del botón de envío.

        En modo registro exige además la confirmación y que el email exista,
        aunque el resto de campos esté completo. Un email resuelto como
        inexistente bloquea también el login.
        """

        if self.loading or not self.email or not self.password:
            return False
        if self.mode is FormMode.REGISTRATION:
            return bool(self.confirm_password) and self.email_exists
        return self.state is not FormState.NOT_FOUND

    @property
    def title(self) -> str:
        return "Complete Registration" if self.mode is FormMode.REGISTRATION else "Patient Login"

    @property
    def subtitle(self) -> str:
        if self.mode is FormMode.REGISTRATION:
            return "Create your password to complete registration"
        return "Sign in with your email and password"

    @property
    def password_label(self) -> str:
        return "Create Password" if self.mode is FormMode.REGISTRATION else "Password"

    @property
    def submit_label(self) -> str:
        return "Complete Registration" if self.mode is FormMode.REGISTRATION else "Sign In"
