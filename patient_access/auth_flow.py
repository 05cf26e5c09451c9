# --------------------------------------------------------------
# File: auth_flow.py
# Description: Registro, login y establecimiento de la sesión local del paciente.
# --------------------------------------------------------------
"""Flujo de acceso de pacientes sobre el servicio de autenticación y el directorio."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from patient_access.errors import (
    AuthServiceError,
    EnrollmentDeniedError,
    MarkRegisteredError,
    PatientAccessError,
    PatientLookupError,
)
from patient_access.form import PatientForm
from patient_access.gateway import SIGNED_IN, AuthGateway, PatientDirectory, Subscription
from patient_access.models import (
    AuthSession,
    FormMode,
    LocalSession,
    OutcomeKind,
    PatientRecord,
    PatientStatus,
    SubmitOutcome,
)
from patient_access.password_policy import ensure_registration_passwords
from patient_access.registration_latch import RegistrationLatch
from patient_access.session_store import SessionStore
from patient_access.status_resolver import StatusResolver

logger = logging.getLogger(__name__)

REGISTERED_TITLE = "Registration successful!"
REGISTERED_TEXT = "You're all set. You can now sign in."
CONFIRM_TITLE = "Confirm your email"
CONFIRM_TEXT = "We sent a confirmation link. After confirming, return here to sign in."
REGISTRATION_FAILED_TITLE = "Registration Failed"
WELCOME_TITLE = "Welcome back!"
ACCESS_DENIED_TITLE = "Access denied"
LOGIN_FAILED_TITLE = "Login Failed"


def _noop_navigate(_target: str) -> None:
    return None


class PatientAccessFlow:
    """Coordina el resolutor de estado, el formulario y el alta o login del paciente.

    Una instancia equivale a un formulario montado: el cerrojo de registro y la
    suscripción a eventos de sesión viven lo mismo que ella.

    Args:
        auth (AuthGateway): Servicio de credenciales.
        directory (PatientDirectory): Procedimientos privilegiados y tabla de pacientes.
        store (SessionStore): Persistencia de la sesión local.
        email_redirect_to (str): URL a la que apunta el enlace de confirmación del alta.
        landing_page (str): Destino tras un login correcto.
        navigate (Callable[[str], None]): Función de navegación de la capa de presentación.

    """

    def __init__(
        self,
        auth: AuthGateway,
        directory: PatientDirectory,
        store: SessionStore,
        *,
        email_redirect_to: str,
        landing_page: str,
        navigate: Callable[[str], None] = _noop_navigate,
    ):
        self._auth = auth
        self._directory = directory
        self._store = store
        self._email_redirect_to = email_redirect_to
        self._landing_page = landing_page
        self._navigate = navigate
        self._subscription: Optional[Subscription] = None

        self.form = PatientForm()
        self.resolver = StatusResolver(directory)
        self.latch = RegistrationLatch()

    # -- ciclo de vida ---------------------------------------------------

    def mount(self) -> None:
        if self._subscription is None:
            self._subscription = self._auth.on_auth_state_change(self.on_auth_event)

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    # -- entrada del email -----------------------------------------------

    def on_email_change(self, email: str) -> Optional[PatientStatus]:
        """Actualiza el email y, si contiene ``@``, resuelve su estado.

        Returns:
            Optional[PatientStatus]: Estado obtenido, o ``None`` si no hubo consulta.

        """

        self.form.email = email
        status = self.resolver.resolve(email)
        if status is not None and self.resolver.status is not None:
            self.form.apply_status(self.resolver.status)
        return status

    # -- marcado de registro ---------------------------------------------

    def on_auth_event(self, event: str, session: Optional[AuthSession]) -> None:
        """Red de seguridad: una sesión iniciada durante el registro marca al paciente."""

        if event != SIGNED_IN or self.form.mode is not FormMode.REGISTRATION:
            return
        self._mark_registered(source="auth event")

    def _mark_registered(self, source: str) -> bool:
        if not self.latch.try_claim():
            return False
        try:
            self._directory.mark_patient_registered()
        except MarkRegisteredError as exc:
            logger.error("Error marking patient registered (%s): %s", source, exc.message)
            self.latch.release()
            return False
        self.latch.confirm()
        logger.info("Patient %s marked as registered (%s)", self.form.email, source)
        return True

    # -- envío -----------------------------------------------------------

    def submit_registration(self) -> SubmitOutcome:
        """Crea las credenciales del paciente ya dado de alta por su psicólogo.

        Returns:
            SubmitOutcome: ``REGISTERED`` si el servicio devolvió sesión inmediata,
            ``CONFIRMATION_PENDING`` si falta confirmar el email.

        Raises:
            FormValidationError: Contraseñas distintas o demasiado cortas.
            AuthServiceError: El servicio rechazó el alta.

        """

        form = self.form
        ensure_registration_passwords(form.password, form.confirm_password)

        result = self._auth.sign_up(form.email, form.password, redirect_to=self._email_redirect_to)
        if result.user is None:
            raise AuthServiceError("Registration failed")

        if result.session is not None:
            self._mark_registered(source="sign-up response")
            outcome = SubmitOutcome(
                kind=OutcomeKind.REGISTERED,
                title=REGISTERED_TITLE,
                description=REGISTERED_TEXT,
            )
        else:
            outcome = SubmitOutcome(
                kind=OutcomeKind.CONFIRMATION_PENDING,
                title=CONFIRM_TITLE,
                description=CONFIRM_TEXT,
            )

        logger.info("Registration for %s completed: %s", form.email, outcome.kind.value)
        form.reset_to_login()
        return outcome

    def _find_patient(self, email: Optional[str]) -> Optional[PatientRecord]:
        if not email:
            return None
        try:
            return self._directory.find_patient_by_email(email)
        except PatientLookupError as exc:
            logger.warning("Patient record lookup failed for %s: %s", email, exc.message)
            return None

    def submit_login(self) -> SubmitOutcome:
        """Verifica credenciales, exige ficha de paciente y guarda la sesión local.

        Raises:
            AuthServiceError: Credenciales rechazadas o cierre de sesión fallido.
            EnrollmentDeniedError: Usuario autenticado sin ficha de paciente; la
                sesión recién obtenida se cierra antes de lanzar.

        """

        form = self.form
        result = self._auth.sign_in_with_password(form.email, form.password)
        if result.user is None:
            raise AuthServiceError("Authentication failed")

        patient = self._find_patient(result.user.email)
        if patient is None:
            logger.warning("Authenticated user %s has no patient record, signing out", result.user.id)
            self._auth.sign_out()
            raise EnrollmentDeniedError()

        self._store.save(patient)
        logger.info("Patient %s logged in", patient.id)
        self._navigate(self._landing_page)
        return SubmitOutcome(
            kind=OutcomeKind.LOGGED_IN,
            title=WELCOME_TITLE,
            description=f"Hello {patient.name}, you're now logged in.",
            redirect_to=self._landing_page,
        )

    @staticmethod
    def _failure(registering: bool, message: str) -> SubmitOutcome:
        if registering:
            kind, title = OutcomeKind.REGISTRATION_FAILED, REGISTRATION_FAILED_TITLE
        else:
            kind, title = OutcomeKind.LOGIN_FAILED, LOGIN_FAILED_TITLE
        return SubmitOutcome(kind=kind, title=title, description=message, destructive=True)

    def submit(self) -> Optional[SubmitOutcome]:
        """Manejador único del envío: elige la vía según el modo y traduce los errores.

        Returns:
            Optional[SubmitOutcome]: Resultado a notificar, o ``None`` si el envío
            estaba deshabilitado.

        """

        form = self.form
        if not form.can_submit():
            logger.debug("Submit ignored: form not submittable in state %s", form.state.value)
            return None

        registering = form.mode is FormMode.REGISTRATION
        form.loading = True
        try:
            return self.submit_registration() if registering else self.submit_login()
        except EnrollmentDeniedError as exc:
            return SubmitOutcome(
                kind=OutcomeKind.ACCESS_DENIED,
                title=ACCESS_DENIED_TITLE,
                description=exc.message,
                destructive=True,
            )
        except PatientAccessError as exc:
            logger.info("Submit failed for %s: %s", form.email, exc.message)
            return self._failure(registering, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error submitting form for %s", form.email)
            return self._failure(registering, str(exc))
        finally:
            form.loading = False

    # -- sesión local ----------------------------------------------------

    def current_session(self) -> Optional[LocalSession]:
        return self._store.load()

    def sign_out(self) -> None:
        """Cierra la sesión en el servicio y borra la copia local."""

        try:
            self._auth.sign_out()
        finally:
            self._store.clear()
